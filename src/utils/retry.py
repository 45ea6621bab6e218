"""Retry policy for callers that wrap the registry clients.

The clients never retry on their own. Every registry operation is a
read-only GET, so repeating a whole operation is always safe.
"""

import logging
from typing import Awaitable, Callable, TypeVar

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.api.errors import RegistryError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Network errors and timeouts never produced a response
RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def is_retryable(error: BaseException) -> bool:
    """Check whether a registry failure is worth repeating."""
    if not isinstance(error, RegistryError):
        return False
    cause = error.cause
    if not isinstance(cause, TransportError):
        return False
    if cause.status_code is None:
        return isinstance(cause.cause, httpx.TransportError)
    return cause.status_code in RETRYABLE_STATUS_CODES


def with_retry(
    func: Callable[..., Awaitable[T]],
    attempts: int = 3,
    min_wait: float = 1,
    max_wait: float = 10,
) -> Callable[..., Awaitable[T]]:
    """Wrap a coroutine function with exponential backoff."""
    return retry(
        retry=retry_if_exception(is_retryable),
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        reraise=True,
        before_sleep=lambda retry_state: logger.warning(
            "Retrying registry call (attempt %d)", retry_state.attempt_number
        ),
    )(func)
