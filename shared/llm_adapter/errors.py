"""
Error taxonomy for the LLM adapter layer.

Non-transient errors (bad input, missing credentials, rejected credentials)
derive from NonTransientError and are never retried. Everything else that
derives from AIServiceError is considered transient by the retry wrapper.
"""

from __future__ import annotations


class AIServiceError(Exception):
    """Base class for every error raised by the generation pipeline."""


class NonTransientError(AIServiceError):
    """Marker base: retrying will not fix this failure."""


class InputValidationError(NonTransientError):
    """The caller supplied text that cannot be sent to a model."""


class EmptyInputError(InputValidationError):
    pass


class TooLongError(InputValidationError):
    pass


class NotConfiguredError(NonTransientError):
    """A provider was selected but its credential is absent."""


class ProviderAuthError(NonTransientError):
    """The provider rejected our credentials (401/402/403)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderError(AIServiceError):
    """Transport failure, rate limit or 5xx from a provider."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(AIServiceError):
    pass


class GenerationTimeoutError(AIServiceError):
    pass


class StructuredGenerationError(AIServiceError):
    """The model reply did not contain the JSON a structured endpoint needs."""
