"""
Bounded exponential-backoff retry for provider calls.

Attempts run strictly one after another (never fanned out) so a retried
generation is billed at most once per attempt. The delay before retry n is
base_delay_s * 2^(n-1); nothing waits before the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from shared.llm_adapter.errors import NonTransientError
from shared.observability.metrics import llm_retries

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 2
DEFAULT_BASE_DELAY_S = 1.0

_NON_TRANSIENT_STATUSES = {401, 402, 403}
_NON_TRANSIENT_MARKERS = (
    "cannot be empty",
    "maximum length",
    "API key",
    "not configured",
    "credits",
)


def is_non_transient(exc: BaseException) -> bool:
    """True when retrying cannot help: bad input, missing or rejected credentials."""
    if isinstance(exc, NonTransientError):
        return True
    if getattr(exc, "status_code", None) in _NON_TRANSIENT_STATUSES:
        return True
    message = str(exc)
    return any(marker in message for marker in _NON_TRANSIENT_MARKERS)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay_s: float = DEFAULT_BASE_DELAY_S,
    operation_name: str = "generate",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Run operation up to max_retries + 1 times.

    Non-transient errors are re-raised on the spot. Transient errors are
    retried until the budget is spent, then the last one is re-raised.
    """
    attempt = 0
    while True:
        if attempt > 0:
            delay = base_delay_s * (2 ** (attempt - 1))
            logger.info(
                "Retry attempt %d for %s after %.1fs", attempt, operation_name, delay
            )
            llm_retries.labels(operation=operation_name).inc()
            await sleep(delay)
        try:
            return await operation()
        except Exception as exc:
            logger.warning(
                "Attempt %d of %s failed: %s", attempt + 1, operation_name, exc
            )
            if is_non_transient(exc) or attempt >= max_retries:
                raise
            attempt += 1
