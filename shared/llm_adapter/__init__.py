from shared.llm_adapter.base import LLMProvider, build_messages
from shared.llm_adapter.errors import (
    AIServiceError,
    EmptyInputError,
    EmptyResponseError,
    GenerationTimeoutError,
    InputValidationError,
    NonTransientError,
    NotConfiguredError,
    ProviderAuthError,
    ProviderError,
    StructuredGenerationError,
    TooLongError,
)
from shared.llm_adapter.factory import ProviderSettings, build_providers, close_providers
from shared.llm_adapter.models import ChatMessage, LLMRequest, LLMResponse, ModelType
from shared.llm_adapter.mock_provider import MockProvider
from shared.llm_adapter.retry import is_non_transient, with_retry

__all__ = [
    "LLMProvider",
    "LLMRequest",
    "LLMResponse",
    "ChatMessage",
    "ModelType",
    "MockProvider",
    "ProviderSettings",
    "build_messages",
    "build_providers",
    "close_providers",
    "with_retry",
    "is_non_transient",
    "AIServiceError",
    "NonTransientError",
    "InputValidationError",
    "EmptyInputError",
    "TooLongError",
    "NotConfiguredError",
    "ProviderAuthError",
    "ProviderError",
    "EmptyResponseError",
    "GenerationTimeoutError",
    "StructuredGenerationError",
]
