"""
Provider factory -- builds the two generation slots from settings.

Slots:

  llama    Primary, OpenAI-compatible endpoint chosen by AI_PROVIDER:
             openrouter  OPENROUTER_API_KEY, OPENROUTER_API_URL, OPENROUTER_MODEL (default)
             ollama      local server at OLLAMA_BASE_URL, LLAMA_MODEL, no key needed
             openai      OPENAI_API_KEY, LLAMA_MODEL
             mock        built-in deterministic mock, no network
           When AI_PROVIDER is not "ollama" an OpenRouter key always wins.
  mistral  Secondary, Mistral API -- MISTRAL_API_KEY, MISTRAL_MODEL, MISTRAL_API_URL

A slot whose credential is missing is still built; it raises
NotConfiguredError on use, and reports configured=False to /health.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from shared.llm_adapter.base import LLMProvider
from shared.llm_adapter.mistral_provider import DEFAULT_BASE_URL as MISTRAL_BASE_URL
from shared.llm_adapter.mistral_provider import MistralProvider
from shared.llm_adapter.mock_provider import MockProvider
from shared.llm_adapter.models import ModelType
from shared.llm_adapter.openai_provider import OpenAIProvider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 60_000
MIN_TIMEOUT_MS = 5_000

_DEFAULT_LLAMA_MODEL = "qwen/qwen-2.5-7b-instruct"


def parse_timeout_ms(raw: str | None, default: int = DEFAULT_TIMEOUT_MS) -> int:
    """Unparseable values fall back to the default; the result is floored at 5s."""
    try:
        value = int(raw) if raw not in (None, "") else default
    except ValueError:
        value = default
    return max(MIN_TIMEOUT_MS, value)


@dataclass(frozen=True)
class ProviderSettings:
    ai_provider: str = "openrouter"
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = _DEFAULT_LLAMA_MODEL
    ollama_base_url: str = "http://localhost:11434/v1"
    openai_api_key: str = ""
    llama_model: str = _DEFAULT_LLAMA_MODEL
    app_origin: str = "http://localhost:3000"
    mistral_api_key: str = ""
    mistral_base_url: str = MISTRAL_BASE_URL
    mistral_model: str = "mistral-small-latest"
    request_timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def request_timeout_s(self) -> float:
        return self.request_timeout_ms / 1000

    @classmethod
    def from_env(cls) -> ProviderSettings:
        return cls(
            ai_provider=os.environ.get("AI_PROVIDER", "openrouter").lower(),
            openrouter_api_key=os.environ.get("OPENROUTER_API_KEY", ""),
            openrouter_base_url=os.environ.get(
                "OPENROUTER_API_URL", "https://openrouter.ai/api/v1"
            ).rstrip("/"),
            openrouter_model=os.environ.get("OPENROUTER_MODEL", _DEFAULT_LLAMA_MODEL),
            ollama_base_url=os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434/v1"),
            openai_api_key=os.environ.get("OPENAI_API_KEY", ""),
            llama_model=os.environ.get("LLAMA_MODEL", _DEFAULT_LLAMA_MODEL),
            app_origin=os.environ.get("APP_ORIGIN", "http://localhost:3000"),
            mistral_api_key=os.environ.get("MISTRAL_API_KEY", ""),
            mistral_base_url=os.environ.get("MISTRAL_API_URL", MISTRAL_BASE_URL),
            mistral_model=os.environ.get("MISTRAL_MODEL", "mistral-small-latest"),
            request_timeout_ms=parse_timeout_ms(os.environ.get("AI_REQUEST_TIMEOUT_MS")),
        )


def _build_primary(settings: ProviderSettings) -> OpenAIProvider:
    timeout_s = settings.request_timeout_s

    if settings.openrouter_api_key and settings.ai_provider != "ollama":
        return OpenAIProvider(
            api_key=settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            model=settings.openrouter_model,
            timeout_s=timeout_s,
            default_headers={
                "HTTP-Referer": settings.app_origin,
                "X-Title": "AI Tutor",
            },
        )
    if settings.ai_provider == "ollama":
        return OpenAIProvider(
            api_key="ollama",
            base_url=settings.ollama_base_url,
            model=settings.llama_model,
            timeout_s=timeout_s,
        )
    # openai_api_key may be empty, which leaves the slot unconfigured.
    return OpenAIProvider(
        api_key=settings.openai_api_key or None,
        model=settings.llama_model,
        timeout_s=timeout_s,
    )


def build_providers(settings: ProviderSettings) -> dict[ModelType, LLMProvider]:
    """Return one provider per ModelType for the configured backends."""
    if settings.ai_provider == "mock":
        providers: dict[ModelType, LLMProvider] = {
            ModelType.LLAMA: MockProvider(name=ModelType.LLAMA.value),
            ModelType.MISTRAL: MockProvider(name=ModelType.MISTRAL.value),
        }
    else:
        providers = {
            ModelType.LLAMA: _build_primary(settings),
            ModelType.MISTRAL: MistralProvider(
                api_key=settings.mistral_api_key or None,
                model=settings.mistral_model,
                base_url=settings.mistral_base_url,
                timeout_s=settings.request_timeout_s,
            ),
        }

    logger.info(
        "LLM providers initialized: %s (llama=%s, mistral=%s, timeout=%dms)",
        settings.ai_provider,
        providers[ModelType.LLAMA].configured,
        providers[ModelType.MISTRAL].configured,
        settings.request_timeout_ms,
    )
    return providers


async def close_providers(providers: dict[ModelType, LLMProvider]) -> None:
    for provider in providers.values():
        await provider.aclose()
