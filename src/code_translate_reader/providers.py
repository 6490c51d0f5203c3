import hashlib
import time

from code_translate_reader.types import ProviderId

GOOGLE_ENDPOINT = "https://translate.googleapis.com/translate_a/single"
BAIDU_ENDPOINT = "https://fanyi-api.baidu.com/api/trans/vip/translate"
YOUDAO_ENDPOINT = "https://openapi.youdao.com/api"

# The public gtx endpoint rejects requests without a browser-like agent.
GOOGLE_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/94.0.4606.81 Safari/537.36"
)

PROVIDER_LABELS: dict[ProviderId, str] = {
    ProviderId.GOOGLE: "Google",
    ProviderId.BAIDU: "Baidu",
    ProviderId.YOUDAO: "Youdao",
}

BAIDU_LANGUAGES: dict[str, str] = {
    "zh-CN": "zh",
    "en-US": "en",
    "en": "en",
    "ja": "jp",
    "ko": "kor",
}

YOUDAO_LANGUAGES: dict[str, str] = {
    "zh-CN": "zh-CHS",
    "en-US": "en",
    "en": "en",
    "ja": "ja",
    "ko": "ko",
}

YOUDAO_SIGN_LIMIT = 20


def to_baidu_language_code(code: str) -> str:
    """Map a target language to Baidu's code (e.g. 'ja' -> 'jp'); unknown codes pass through."""
    return BAIDU_LANGUAGES.get(code, code)


def to_youdao_language_code(code: str) -> str:
    """Map a target language to Youdao's code (e.g. 'zh-CN' -> 'zh-CHS'); unknown codes pass through."""
    return YOUDAO_LANGUAGES.get(code, code)


def new_salt() -> str:
    return str(time.time_ns() // 1_000_000)


def baidu_sign(app_id: str, text: str, salt: str, app_secret: str) -> str:
    return hashlib.md5((app_id + text + salt + app_secret).encode("utf-8")).hexdigest()


def youdao_sign_input(text: str) -> str:
    """Youdao v3 signs a truncated form of long queries.

    Texts up to 20 characters are signed whole; longer ones as the first 10
    characters, the length, then the last 10 characters. The server recomputes
    the same value, so this must match exactly.
    """
    if len(text) <= YOUDAO_SIGN_LIMIT:
        return text
    return f"{text[:10]}{len(text)}{text[-10:]}"


def youdao_sign(app_key: str, text: str, salt: str, app_secret: str) -> str:
    raw = app_key + youdao_sign_input(text) + salt + app_secret
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
