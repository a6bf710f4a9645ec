from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from google import genai
from google.genai import types as genai_types
from openai import OpenAI

from jobtracker.config import Settings
from jobtracker.errors import ProviderError
from jobtracker.types import ModelResponse

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderConfig:
    name: str
    api_key: str
    model: str
    temperature: float = 0.7
    timeout_sec: int = 120
    base_url: str = ""
    max_output_tokens: int | None = None
    headers: dict[str, str] = field(default_factory=dict)


class GeminiProvider:
    def __init__(self, config: ProviderConfig):
        if not config.api_key:
            raise ProviderError("Gemini API key not configured")
        self.config = config
        self.client = genai.Client(api_key=config.api_key)

    def complete_text(self, *, prompt: str, system: str | None = None) -> ModelResponse:
        generation_config = genai_types.GenerateContentConfig(
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_output_tokens,
            system_instruction=system,
        )
        try:
            response = self.client.models.generate_content(
                model=self.config.model,
                contents=prompt,
                config=generation_config,
            )
        except Exception as exc:
            raise ProviderError(f"Gemini API error: {exc}") from exc

        text = getattr(response, "text", None) or ""
        if not text.strip():
            raise ProviderError("No content received from Gemini API")

        raw = response.model_dump() if hasattr(response, "model_dump") else {}
        if not isinstance(raw, dict):
            raw = {"raw": raw}
        raw["provider"] = self.config.name
        return ModelResponse(content=text, raw=raw)


class OpenRouterProvider:
    def __init__(self, config: ProviderConfig):
        if not config.api_key:
            raise ProviderError("OpenRouter API key not configured")
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=float(config.timeout_sec),
            default_headers=config.headers,
        )

    def complete_text(self, *, prompt: str, system: str | None = None) -> ModelResponse:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature,
            )
        except Exception as exc:
            status_code = getattr(exc, "status_code", None)
            raise ProviderError(f"OpenRouter API error: {status_code or ''} {exc}".strip()) from exc

        text = self._extract_chat_text(response)
        if not text.strip():
            raise ProviderError("No content received from OpenRouter API")

        raw = response.model_dump() if hasattr(response, "model_dump") else {}
        if not isinstance(raw, dict):
            raw = {"raw": raw}
        raw["provider"] = self.config.name
        return ModelResponse(content=text, raw=raw)

    @staticmethod
    def _extract_chat_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""

        message = getattr(choices[0], "message", None)
        if message is None:
            return ""

        content = getattr(message, "content", "")
        if isinstance(content, str):
            return content
        if content is None:
            return ""
        return str(content)


def parse_json(content: str) -> dict[str, Any]:
    candidate = content.strip()
    if not candidate:
        return {}

    if "```" in candidate:
        parts = candidate.split("```")
        for part in parts:
            part = part.strip()
            if part.startswith("json"):
                part = part[4:].strip()
            if part.startswith("{") and part.endswith("}"):
                candidate = part
                break

    try:
        value = json.loads(candidate)
        return value if isinstance(value, dict) else {}
    except json.JSONDecodeError:
        logger.warning("Failed to parse JSON model output")
        return {}


class ProviderPool:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._gemini: dict[tuple[str, str], GeminiProvider] = {}
        self._openrouter: OpenRouterProvider | None = None

    def gemini(self, *, api_key: str = "", model: str = "") -> GeminiProvider:
        key = api_key or self.settings.gemini_api_key
        model_id = model or self.settings.gemini_model
        cache_key = (key, model_id)
        if cache_key not in self._gemini:
            self._gemini[cache_key] = GeminiProvider(
                ProviderConfig(
                    name="gemini",
                    api_key=key,
                    model=model_id,
                    temperature=self.settings.gemini_temperature,
                    max_output_tokens=self.settings.gemini_max_output_tokens,
                )
            )
        return self._gemini[cache_key]

    def openrouter(self) -> OpenRouterProvider:
        if self._openrouter is None:
            self._openrouter = OpenRouterProvider(
                ProviderConfig(
                    name="openrouter",
                    api_key=self.settings.openrouter_api_key,
                    model=self.settings.openrouter_model,
                    base_url=self.settings.openrouter_base_url,
                    timeout_sec=self.settings.openrouter_timeout_sec,
                    headers={
                        "HTTP-Referer": self.settings.openrouter_referer,
                        "X-Title": self.settings.openrouter_title,
                    },
                )
            )
        return self._openrouter
