from __future__ import annotations

from types import SimpleNamespace

import pytest

from jobtracker.errors import ProviderError
from jobtracker.llm.providers import GeminiProvider, OpenRouterProvider, ProviderConfig, parse_json


class FakeChatPayload:
    def __init__(self, *, content, raw: dict | None = None):
        self.choices = [SimpleNamespace(message=SimpleNamespace(content=content))]
        self._raw = raw or {}

    def model_dump(self) -> dict:
        return self._raw


class FakeChatCompletionsAPI:
    def __init__(self, fn):
        self._fn = fn

    def create(self, **kwargs):
        return self._fn(**kwargs)


class FakeOpenAIClient:
    def __init__(self, fn):
        self.chat = SimpleNamespace(completions=FakeChatCompletionsAPI(fn))


class FakeGeminiModels:
    def __init__(self, fn):
        self._fn = fn

    def generate_content(self, **kwargs):
        return self._fn(**kwargs)


class FakeGeminiClient:
    def __init__(self, fn):
        self.models = FakeGeminiModels(fn)


def _openrouter(fn) -> OpenRouterProvider:
    provider = OpenRouterProvider(
        ProviderConfig(
            name="openrouter",
            api_key="dummy",
            model="deepseek/deepseek-r1-0528:free",
            base_url="http://localhost:9999/v1",
            timeout_sec=5,
        )
    )
    provider.client = FakeOpenAIClient(fn)
    return provider


def _gemini(fn) -> GeminiProvider:
    provider = GeminiProvider(ProviderConfig(name="gemini", api_key="dummy", model="gemini-2.0-flash"))
    provider.client = FakeGeminiClient(fn)
    return provider


def test_openrouter_sends_system_and_user_messages() -> None:
    captured = {}

    def chat_fn(**kwargs):
        captured.update(kwargs)
        return FakeChatPayload(content="CHAT_OK", raw={"id": "chat_1"})

    result = _openrouter(chat_fn).complete_text(prompt="ping", system="be brief")

    assert result.content == "CHAT_OK"
    assert result.raw["provider"] == "openrouter"
    assert captured["model"] == "deepseek/deepseek-r1-0528:free"
    assert [message["role"] for message in captured["messages"]] == ["system", "user"]


def test_openrouter_empty_content_raises() -> None:
    provider = _openrouter(lambda **kwargs: FakeChatPayload(content=None))

    with pytest.raises(ProviderError, match="No content received from OpenRouter API"):
        provider.complete_text(prompt="ping")


def test_openrouter_wraps_sdk_errors() -> None:
    def chat_fn(**kwargs):
        raise RuntimeError("rate limited")

    with pytest.raises(ProviderError, match="rate limited"):
        _openrouter(chat_fn).complete_text(prompt="ping")


def test_gemini_returns_text() -> None:
    captured = {}

    def generate_fn(**kwargs):
        captured.update(kwargs)
        return SimpleNamespace(text="GEMINI_OK")

    result = _gemini(generate_fn).complete_text(prompt="ping")

    assert result.content == "GEMINI_OK"
    assert result.raw["provider"] == "gemini"
    assert captured["model"] == "gemini-2.0-flash"
    assert captured["contents"] == "ping"


def test_gemini_empty_text_raises() -> None:
    with pytest.raises(ProviderError, match="No content received from Gemini API"):
        _gemini(lambda **kwargs: SimpleNamespace(text="")).complete_text(prompt="ping")


def test_gemini_requires_api_key() -> None:
    with pytest.raises(ProviderError, match="not configured"):
        GeminiProvider(ProviderConfig(name="gemini", api_key="", model="gemini-2.0-flash"))


def test_parse_json_handles_fenced_payload() -> None:
    payload = parse_json('Here you go:\n```json\n{"content": "ok", "metadata": {"ats_score": 90}}\n```')

    assert payload == {"content": "ok", "metadata": {"ats_score": 90}}


def test_parse_json_returns_empty_dict_for_plain_text() -> None:
    assert parse_json("just some advice") == {}
