"""
Deterministic mock LLM provider for testing and development.

Without scripted replies it always returns the same output for the same
prompt hash, making the whole service reproducible without network calls.
With scripted replies it plays them back in order; a scripted exception is
raised instead of returned.
"""

from __future__ import annotations

import hashlib
from collections import deque
from collections.abc import Iterable

from shared.llm_adapter.errors import EmptyResponseError, NotConfiguredError
from shared.llm_adapter.models import LLMRequest, LLMResponse

_MOCK_PREFIX = "[MOCK] "


class MockProvider:

    def __init__(
        self,
        replies: Iterable[str | BaseException] | None = None,
        name: str = "mock",
        configured: bool = True,
    ) -> None:
        self.name = name
        self._configured = configured
        self._replies = deque(replies or [])
        self.requests: list[LLMRequest] = []

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def script(self, *replies: str | BaseException) -> None:
        """Queue replies to play back before falling back to the hash reply."""
        self._replies.extend(replies)

    async def generate(self, request: LLMRequest) -> LLMResponse:
        if not self._configured:
            raise NotConfiguredError(f"{self.name} is not configured.")
        self.requests.append(request)
        prompt = request.messages[-1].content
        prompt_hash = hashlib.sha256(prompt.encode()).hexdigest()

        if self._replies:
            reply = self._replies.popleft()
            if isinstance(reply, BaseException):
                raise reply
            content = reply
        else:
            content = (
                f"{_MOCK_PREFIX}Deterministic response for prompt hash "
                f"{prompt_hash[:12]}."
            )

        if not content:
            raise EmptyResponseError(f"Empty {self.name} response")

        fake_prompt_tokens = len(prompt.split())
        fake_completion_tokens = len(content.split())
        return LLMResponse(
            content=content,
            model="mock-deterministic",
            prompt_tokens=fake_prompt_tokens,
            completion_tokens=fake_completion_tokens,
            total_tokens=fake_prompt_tokens + fake_completion_tokens,
        )

    async def aclose(self) -> None:
        return None
