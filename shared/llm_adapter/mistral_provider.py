"""
Mistral chat completions provider (the secondary "mistral" slot).

Talks to the Mistral REST API directly over httpx. Mistral may return the
message content as a list of typed chunks rather than a string; the reply is
flattened to the text chunks only.
"""

from __future__ import annotations

import logging

import httpx

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

DEFAULT_BASE_URL = "https://api.mistral.ai/v1"

_AUTH_STATUSES = {401, 402, 403}


class MistralProvider:

    def __init__(
        self,
        api_key: str | None,
        model: str = "mistral-small-latest",
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = 60.0,
        client: httpx.AsyncClient | None = None,
        name: str = "mistral",
    ) -> None:
        self.name = name
        self._api_key = api_key or ""
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def generate(self, request: LLMRequest) -> LLMResponse:
        if not self._api_key:
            raise NotConfiguredError("Mistral is not configured. Set MISTRAL_API_KEY.")

        model = request.model or self._model
        payload = {
            "model": model,
            "messages": [m.model_dump() for m in request.messages],
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        logger.debug("Mistral request to %s (%d messages)", model, len(request.messages))
        try:
            resp = await self._client.post(
                f"{self._base_url}/chat/completions", json=payload, headers=headers
            )
        except httpx.TimeoutException as exc:
            raise GenerationTimeoutError("Mistral request timeout") from exc
        except httpx.HTTPError as exc:
            raise ProviderError(f"Mistral connection failed: {exc}") from exc

        if resp.status_code in _AUTH_STATUSES:
            raise ProviderAuthError(
                f"Mistral rejected the API key (status {resp.status_code})",
                resp.status_code,
            )
        if resp.status_code >= 400:
            raise ProviderError(
                f"Mistral request failed (status {resp.status_code}): {resp.text[:200]}",
                resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderError("Mistral returned a non-JSON body", resp.status_code) from exc
        if not isinstance(data, dict):
            raise ProviderError("Mistral returned an unexpected body", resp.status_code)

        choices = data.get("choices") or [{}]
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise ProviderError("Mistral returned malformed choices", resp.status_code)
        message = choices[0].get("message")
        content = join_text_chunks(message.get("content") if isinstance(message, dict) else None)
        if not content:
            raise EmptyResponseError("Empty Mistral response")

        reply_model = data.get("model")
        usage = data.get("usage")
        if not isinstance(usage, dict):
            usage = {}
        return LLMResponse(
            content=content,
            model=reply_model if isinstance(reply_model, str) and reply_model else model,
            prompt_tokens=usage.get("prompt_tokens") or 0,
            completion_tokens=usage.get("completion_tokens") or 0,
            total_tokens=usage.get("total_tokens") or 0,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
