import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w

from code_translate_reader.errors import ReaderError
from code_translate_reader.types import ProviderCredentials, ProviderId

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".code-translate-reader"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_TARGET_LANGUAGE = "zh-CN"
DEFAULT_VOICE_SPEED = 1.0
DEFAULT_TRANSLATION_SERVICE = ProviderId.GOOGLE
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_SHOW_ORIGINAL_TEXT = True
DEFAULT_HOVER_DURATION = 5000


@dataclass(frozen=True)
class Config:
    target_language: str = DEFAULT_TARGET_LANGUAGE
    voice_speed: float = DEFAULT_VOICE_SPEED
    translation_service: ProviderId = DEFAULT_TRANSLATION_SERVICE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    show_original_text: bool = DEFAULT_SHOW_ORIGINAL_TEXT
    hover_duration: int = DEFAULT_HOVER_DURATION
    baidu: ProviderCredentials = field(default_factory=ProviderCredentials)
    youdao: ProviderCredentials = field(default_factory=ProviderCredentials)

    def credentials_for(self, provider: ProviderId) -> ProviderCredentials | None:
        if provider is ProviderId.BAIDU:
            return self.baidu
        if provider is ProviderId.YOUDAO:
            return self.youdao
        return None


def parse_provider(value: object) -> ProviderId:
    """Map a configured service name to a provider, falling back to Google for unknown names."""
    try:
        return ProviderId(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown translation service %r, using %s", value, DEFAULT_TRANSLATION_SERVICE)
        return DEFAULT_TRANSLATION_SERVICE


def _table(data: dict[str, Any], name: str, path: Path) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ReaderError(f"Invalid config file {path}: [{name}] must be a table")
    return value


def _number(section: dict[str, Any], key: str, default: float, path: Path) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ReaderError(f"Invalid config file {path}: {key} must be a number, got {value!r}")
    return value


def _flag(section: dict[str, Any], key: str, default: bool, path: Path) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ReaderError(f"Invalid config file {path}: {key} must be true or false, got {value!r}")
    return value


def _string(section: dict[str, Any], key: str, default: str, path: Path) -> str:
    value = section.get(key, default)
    # Baidu app ids are all digits and often written without quotes
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ReaderError(f"Invalid config file {path}: {key} must be a string, got {value!r}")
    return value


def _credentials(
    section: dict[str, Any], id_key: str, id_env: str, secret_env: str, path: Path
) -> ProviderCredentials:
    return ProviderCredentials(
        app_id=_string(section, id_key, "", path) or os.environ.get(id_env, ""),
        app_secret=_string(section, "app_secret", "", path) or os.environ.get(secret_env, ""),
    )


def _read(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ReaderError(f"Invalid config file {path}: {e}") from e


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from TOML file, falling back to defaults for missing values.

    Empty provider credentials are filled from BAIDU_APP_ID / BAIDU_APP_SECRET and
    YOUDAO_APP_KEY / YOUDAO_APP_SECRET.
    """
    data = _read(path)

    defaults = _table(data, "defaults", path)
    display = _table(data, "display", path)

    return Config(
        target_language=_string(defaults, "target_language", DEFAULT_TARGET_LANGUAGE, path),
        voice_speed=float(_number(defaults, "voice_speed", DEFAULT_VOICE_SPEED, path)),
        translation_service=parse_provider(
            defaults.get("translation_service", DEFAULT_TRANSLATION_SERVICE)
        ),
        request_timeout=float(_number(defaults, "request_timeout", DEFAULT_REQUEST_TIMEOUT, path)),
        show_original_text=_flag(display, "show_original_text", DEFAULT_SHOW_ORIGINAL_TEXT, path),
        hover_duration=int(_number(display, "hover_duration", DEFAULT_HOVER_DURATION, path)),
        baidu=_credentials(_table(data, "baidu", path), "app_id", "BAIDU_APP_ID", "BAIDU_APP_SECRET", path),
        youdao=_credentials(
            _table(data, "youdao", path), "app_key", "YOUDAO_APP_KEY", "YOUDAO_APP_SECRET", path
        ),
    )


def save_translation_service(provider: ProviderId, path: Path = CONFIG_FILE) -> None:
    """Persist the provider choice, leaving every other setting untouched."""
    data = _read(path)
    defaults = _table(data, "defaults", path)
    defaults["translation_service"] = provider.value
    data["defaults"] = defaults

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)
