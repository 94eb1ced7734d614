"""
OpenAI-compatible LLM provider (the primary "llama" slot).

Works with any API that speaks the OpenAI Chat Completions protocol:
  - OpenRouter  (base_url=https://openrouter.ai/api/v1)
  - Ollama      (base_url=http://localhost:11434/v1)   -- no real key needed
  - OpenAI      (base_url=https://api.openai.com/v1)

The SDK's own retry loop is disabled; retrying is the caller's job. Each
call is raced against the configured request timeout and the losing call
is cancelled.
"""

from __future__ import annotations

import asyncio
import logging

import openai
from openai import AsyncOpenAI

from shared.llm_adapter.base import join_text_chunks
from shared.llm_adapter.errors import (
    EmptyResponseError,
    GenerationTimeoutError,
    NotConfiguredError,
    ProviderAuthError,
    ProviderError,
)
from shared.llm_adapter.models import LLMRequest, LLMResponse

logger = logging.getLogger(__name__)

_AUTH_STATUSES = {401, 402, 403}


class OpenAIProvider:
    """
    OpenAI Chat Completions adapter.

    Construct without an api_key to get an unconfigured provider: generate()
    then raises NotConfiguredError and never touches the network.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str | None = None,
        timeout_s: float = 60.0,
        default_headers: dict[str, str] | None = None,
        name: str = "llama",
        client=None,
    ) -> None:
        self.name = name
        self._model = model
        self._timeout_s = timeout_s
        self._client = client

        if self._client is None and api_key:
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout_s,
                max_retries=0,
                default_headers=default_headers,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def generate(self, request: LLMRequest) -> LLMResponse:
        if self._client is None:
            raise NotConfiguredError(
                "LLaMA is not configured. Set OPENROUTER_API_KEY (or AI_PROVIDER=ollama)."
            )

        model = request.model or self._model
        logger.debug("LLaMA request to %s (%d messages)", model, len(request.messages))
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=model,
                    messages=[m.model_dump() for m in request.messages],
                    max_tokens=request.max_tokens,
                    temperature=request.temperature,
                ),
                timeout=self._timeout_s,
            )
        except asyncio.TimeoutError as exc:
            raise GenerationTimeoutError("LLaMA request timeout") from exc
        except openai.APITimeoutError as exc:
            raise GenerationTimeoutError("LLaMA request timeout") from exc
        except openai.APIStatusError as exc:
            if exc.status_code in _AUTH_STATUSES:
                raise ProviderAuthError(str(exc), exc.status_code) from exc
            raise ProviderError(str(exc), exc.status_code) from exc
        except openai.APIConnectionError as exc:
            raise ProviderError(f"LLaMA connection failed: {exc}") from exc

        choices = response.choices or []
        content = join_text_chunks(choices[0].message.content) if choices else ""
        if not content:
            raise EmptyResponseError("Empty LLaMA response")

        usage = response.usage
        return LLMResponse(
            content=content,
            model=response.model or model,
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            total_tokens=usage.total_tokens if usage else 0,
        )

    async def aclose(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
