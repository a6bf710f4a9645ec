from __future__ import annotations

from jobtracker.errors import ProviderError
from jobtracker.types import ModelResponse


class FakeProvider:
    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[dict] = []

    def complete_text(self, *, prompt: str, system: str | None = None) -> ModelResponse:
        self.calls.append({"prompt": prompt, "system": system})
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return ModelResponse(content=reply)


class FakePool:
    def __init__(self, *, gemini: FakeProvider | None = None, openrouter: FakeProvider | None = None):
        self._gemini = gemini
        self._openrouter = openrouter
        self.gemini_requests: list[tuple[str, str]] = []

    def gemini(self, *, api_key: str = "", model: str = "") -> FakeProvider:
        self.gemini_requests.append((api_key, model))
        if self._gemini is None:
            raise ProviderError("Gemini API key not configured")
        return self._gemini

    def openrouter(self) -> FakeProvider:
        if self._openrouter is None:
            raise ProviderError("OpenRouter API key not configured")
        return self._openrouter


def failing(message: str = "upstream exploded") -> ProviderError:
    return ProviderError(message)
