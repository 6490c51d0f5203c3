import logging

import httpx

from code_translate_reader.config import Config
from code_translate_reader.errors import ReaderError
from code_translate_reader.speech import SpeechEngine
from code_translate_reader.text import normalize
from code_translate_reader.translator import create_translator
from code_translate_reader.types import ProviderId, SpeechRequest, TranslationRequest, TranslationResult

logger = logging.getLogger(__name__)


async def translate(
    text: str,
    config: Config,
    target_language: str | None = None,
    provider: ProviderId | None = None,
    client: httpx.AsyncClient | None = None,
) -> TranslationResult:
    """Normalize *text* and translate it with the configured provider.

    Adapter failures propagate unchanged; there is no retry or fallback provider.
    """
    request = TranslationRequest(
        source_text=normalize(text),
        target_language=target_language or config.target_language,
        provider=provider or config.translation_service,
    )
    if not request.source_text:
        raise ReaderError("Nothing to translate")

    logger.debug(
        "Translating %d chars to %s via %s",
        len(request.source_text), request.target_language, request.provider,
    )
    translator = create_translator(request.provider, config, client=client)
    translated_text = await translator.translate(request.source_text, request.target_language)
    return TranslationResult(
        text=translated_text,
        source_text=request.source_text,
        target_language=request.target_language,
        provider=request.provider,
    )


async def speak(text: str, engine: SpeechEngine, speed: float = 1.0) -> None:
    request = SpeechRequest(text=normalize(text), speed=speed)
    if not request.text:
        raise ReaderError("Nothing to read")
    await engine.speak(request.text, request.speed)
