"""Data models for the LLM adapter layer."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.3


class ModelType(str, Enum):
    LLAMA = "llama"
    MISTRAL = "mistral"

    @classmethod
    def from_value(cls, value: Any) -> ModelType:
        """Anything other than "mistral" selects the primary provider."""
        return cls.MISTRAL if value == cls.MISTRAL.value else cls.LLAMA


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user"]
    content: str


class LLMRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    messages: tuple[ChatMessage, ...]
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=1)
    model: str = ""


class LLMResponse(BaseModel):
    content: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
