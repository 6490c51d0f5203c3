from dataclasses import dataclass
from enum import StrEnum


class ProviderId(StrEnum):
    GOOGLE = "google"
    BAIDU = "baidu"
    YOUDAO = "youdao"


@dataclass(frozen=True)
class ProviderCredentials:
    app_id: str = ""
    app_secret: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.app_id and self.app_secret)


@dataclass(frozen=True)
class TranslationRequest:
    source_text: str
    target_language: str
    provider: ProviderId


@dataclass(frozen=True)
class TranslationResult:
    text: str
    source_text: str
    target_language: str
    provider: ProviderId


@dataclass(frozen=True)
class SpeechRequest:
    text: str
    speed: float = 1.0
