"""Length and emptiness bounds for user text sent to a model."""

from __future__ import annotations

from typing import Any

from shared.llm_adapter import EmptyInputError, TooLongError

MAX_PROMPT_LENGTH = 32_000
MIN_PROMPT_LENGTH = 1


def validate_prompt(text: Any, kind: str = "Prompt") -> None:
    """Raise EmptyInputError / TooLongError; non-strings count as empty."""
    trimmed = text.strip() if isinstance(text, str) else ""
    if len(trimmed) < MIN_PROMPT_LENGTH:
        raise EmptyInputError(f"{kind} cannot be empty")
    if len(trimmed) > MAX_PROMPT_LENGTH:
        raise TooLongError(f"{kind} exceeds maximum length ({MAX_PROMPT_LENGTH} characters)")


def validate_question(text: Any) -> None:
    validate_prompt(text, kind="Question")
