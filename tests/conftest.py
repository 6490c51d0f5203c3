import os
from typing import Any

import httpx
import pytest


@pytest.fixture
def require_network() -> None:
    if not os.environ.get("CODE_TRANSLATE_READER_INTEGRATION"):
        pytest.skip("CODE_TRANSLATE_READER_INTEGRATION not set")


class FakeTranslator:
    def __init__(self, translated_text: str = "translated text") -> None:
        self.translated_text = translated_text
        self.call_count = 0
        self.calls: list[tuple[str, str]] = []

    async def translate(self, text: str, target_language: str) -> str:
        self.call_count += 1
        self.calls.append((text, target_language))
        return self.translated_text


class FakeSpeechEngine:
    def __init__(self) -> None:
        self.calls: list[tuple[str, float]] = []
        self.stopped = False

    async def speak(self, text: str, speed: float = 1.0) -> None:
        self.calls.append((text, speed))

    def stop(self) -> None:
        self.stopped = True


class FakeService:
    """Answers every request with canned JSON and records what was sent."""

    def __init__(self, payload: Any = None, status_code: int = 200, error: Exception | None = None) -> None:
        self.payload = payload
        self.status_code = status_code
        self.error = error
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]
