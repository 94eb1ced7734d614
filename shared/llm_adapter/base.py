"""Capability interface that every LLM provider implements."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from shared.llm_adapter.models import ChatMessage, LLMRequest, LLMResponse


@runtime_checkable
class LLMProvider(Protocol):
    """
    Contract for LLM providers.

    Every implementation MUST:
    - Raise NotConfiguredError before any network call when its credential is absent
    - Normalise the provider reply to a single non-empty string
      (EmptyResponseError otherwise)
    - Leave retrying to the caller
    """

    name: str

    @property
    def configured(self) -> bool:
        """True when the provider holds the credential it needs."""

    async def generate(self, request: LLMRequest) -> LLMResponse:
        """Send the messages and return the model's response."""

    async def aclose(self) -> None:
        """Release network resources."""


def build_messages(prompt: str, system_prompt: str | None = None) -> tuple[ChatMessage, ...]:
    """At most one system message, always one trailing user message."""
    messages: list[ChatMessage] = []
    if system_prompt:
        messages.append(ChatMessage(role="system", content=system_prompt))
    messages.append(ChatMessage(role="user", content=prompt))
    return tuple(messages)


def join_text_chunks(raw: Any) -> str:
    """
    Flatten a message content field to plain text.

    Providers return either a string or a list of typed chunks; only chunks
    typed "text" contribute.
    """
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, list):
        parts = []
        for chunk in raw:
            chunk_type = chunk.get("type") if isinstance(chunk, dict) else getattr(chunk, "type", None)
            text = chunk.get("text") if isinstance(chunk, dict) else getattr(chunk, "text", None)
            if chunk_type == "text" and isinstance(text, str):
                parts.append(text)
        return "".join(parts)
    return ""
