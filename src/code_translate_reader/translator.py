import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from code_translate_reader.config import DEFAULT_REQUEST_TIMEOUT, Config
from code_translate_reader.errors import (
    MissingCredentialsError,
    NetworkError,
    ServiceError,
    UnexpectedResponseShapeError,
)
from code_translate_reader.providers import (
    BAIDU_ENDPOINT,
    GOOGLE_ENDPOINT,
    GOOGLE_USER_AGENT,
    PROVIDER_LABELS,
    YOUDAO_ENDPOINT,
    baidu_sign,
    new_salt,
    to_baidu_language_code,
    to_youdao_language_code,
    youdao_sign,
)
from code_translate_reader.types import ProviderCredentials, ProviderId

logger = logging.getLogger(__name__)


@runtime_checkable
class Translator(Protocol):
    async def translate(self, text: str, target_language: str) -> str: ...


async def _fetch_json(
    provider: ProviderId,
    client: httpx.AsyncClient | None,
    timeout: float,
    method: str,
    url: str,
    params: dict[str, str],
    headers: dict[str, str] | None = None,
) -> Any:
    label = PROVIDER_LABELS[provider]
    try:
        if client is not None:
            response = await client.request(method, url, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.request(method, url, params=params, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        logger.debug("%s translation failed with HTTP %d", label, status)
        raise NetworkError(
            provider,
            f"{label} translation service error ({status}): {e.response.reason_phrase}",
            status=status,
            cause=e,
        ) from e
    except httpx.HTTPError as e:
        logger.debug("%s translation failed: %s", label, e)
        raise NetworkError(
            provider,
            f"{label} translation service unavailable, try again later or switch provider",
            cause=e,
        ) from e

    try:
        return response.json()
    except ValueError as e:
        raise _shape_error(provider, e) from e


def _shape_error(provider: ProviderId, cause: BaseException | None = None) -> UnexpectedResponseShapeError:
    label = PROVIDER_LABELS[provider]
    logger.debug("%s translation returned an unexpected response", label)
    return UnexpectedResponseShapeError(
        provider, f"{label} translation returned an unexpected response", cause
    )


def _missing_credentials(provider: ProviderId, id_key: str) -> MissingCredentialsError:
    label = PROVIDER_LABELS[provider]
    return MissingCredentialsError(
        provider,
        f"{label} translation needs {id_key} and app_secret: set them in the "
        f"[{provider.value}] section of the config file",
    )


def join_google_fragments(data: Any) -> str:
    """Rebuild the full translation from the gtx response.

    The translation arrives chunked as ``data[0] = [[translated, source, ...], ...]``;
    the translated part of every chunk is joined in order.
    """
    if not isinstance(data, list) or not data or not isinstance(data[0], list):
        raise _shape_error(ProviderId.GOOGLE)
    return "".join(
        item[0]
        for item in data[0]
        if isinstance(item, list) and item and isinstance(item[0], str)
    )


class GoogleTranslator:
    """Unauthenticated client for the public gtx endpoint.

    The endpoint is unofficial and may change without notice.
    """

    provider = ProviderId.GOOGLE

    def __init__(
        self, client: httpx.AsyncClient | None = None, timeout: float = DEFAULT_REQUEST_TIMEOUT
    ) -> None:
        self._client = client
        self.timeout = timeout

    async def translate(self, text: str, target_language: str) -> str:
        params = {
            "client": "gtx",
            "sl": "auto",
            "tl": target_language,
            "dt": "t",
            "q": text,
        }
        data = await _fetch_json(
            self.provider,
            self._client,
            self.timeout,
            "GET",
            GOOGLE_ENDPOINT,
            params,
            headers={"User-Agent": GOOGLE_USER_AGENT},
        )
        return join_google_fragments(data)


class BaiduTranslator:
    provider = ProviderId.BAIDU

    def __init__(
        self,
        credentials: ProviderCredentials,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.credentials = credentials
        self._client = client
        self.timeout = timeout

    async def translate(self, text: str, target_language: str) -> str:
        if not self.credentials.complete:
            raise _missing_credentials(self.provider, "app_id")

        app_id = self.credentials.app_id
        salt = new_salt()
        params = {
            "q": text,
            "from": "auto",
            "to": to_baidu_language_code(target_language),
            "appid": app_id,
            "salt": salt,
            "sign": baidu_sign(app_id, text, salt, self.credentials.app_secret),
        }
        data = await _fetch_json(self.provider, self._client, self.timeout, "GET", BAIDU_ENDPOINT, params)

        # 52000 is Baidu's explicit success code
        if isinstance(data, dict) and str(data.get("error_code", "52000")) != "52000":
            code = str(data["error_code"])
            logger.debug("Baidu translation rejected the request: %s", code)
            raise ServiceError(
                self.provider, f"Baidu translation error {code}: {data.get('error_msg', '')}", code
            )

        try:
            dst = data["trans_result"][0]["dst"]
        except (KeyError, IndexError, TypeError) as e:
            raise _shape_error(self.provider, e) from e
        if not isinstance(dst, str):
            raise _shape_error(self.provider)
        return dst


class YoudaoTranslator:
    provider = ProviderId.YOUDAO

    def __init__(
        self,
        credentials: ProviderCredentials,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self.credentials = credentials
        self._client = client
        self.timeout = timeout

    async def translate(self, text: str, target_language: str) -> str:
        if not self.credentials.complete:
            raise _missing_credentials(self.provider, "app_key")

        app_key = self.credentials.app_id
        salt = new_salt()
        params = {
            "q": text,
            "from": "auto",
            "to": to_youdao_language_code(target_language),
            "appKey": app_key,
            "salt": salt,
            "sign": youdao_sign(app_key, text, salt, self.credentials.app_secret),
            "signType": "v3",
        }
        # Youdao takes everything in the query string; the POST body stays empty.
        data = await _fetch_json(self.provider, self._client, self.timeout, "POST", YOUDAO_ENDPOINT, params)

        if isinstance(data, dict) and str(data.get("errorCode", "0")) != "0":
            code = str(data["errorCode"])
            logger.debug("Youdao translation rejected the request: %s", code)
            raise ServiceError(self.provider, f"Youdao translation error {code}", code)

        try:
            translation = data["translation"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise _shape_error(self.provider, e) from e
        if not isinstance(translation, str):
            raise _shape_error(self.provider)
        return translation


def create_translator(
    provider: ProviderId, config: Config, client: httpx.AsyncClient | None = None
) -> Translator:
    logger.debug("Using %s translation", PROVIDER_LABELS[provider])
    if provider is ProviderId.BAIDU:
        return BaiduTranslator(config.baidu, client=client, timeout=config.request_timeout)
    if provider is ProviderId.YOUDAO:
        return YoudaoTranslator(config.youdao, client=client, timeout=config.request_timeout)
    return GoogleTranslator(client=client, timeout=config.request_timeout)
