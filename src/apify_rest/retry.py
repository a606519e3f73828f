"""
Retry with exponential backoff for idempotent API calls.

Sits above the HTTP executor, which never retries on its own. Only calls
the caller declares idempotent are retried; a POST that creates something
is attempted exactly once.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from apify_rest.config import ClientConfig
from apify_rest.errors import ApifyError, ErrorKind
from apify_rest.result import Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.RATE_LIMIT_ERROR,
        ErrorKind.SERVER_ERROR,
        ErrorKind.NETWORK_ERROR,
        ErrorKind.TIMEOUT_ERROR,
    }
)


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retry attempts (0 = no retries)
        backoff_ms: Base backoff delay in milliseconds
        max_backoff_ms: Maximum backoff delay (caps exponential growth)
        exponential_base: Base for exponential backoff (default 2)
        retryable_kinds: Error kinds that trigger a retry
    """

    max_retries: int = 3
    backoff_ms: int = 500
    max_backoff_ms: int = 60000
    exponential_base: int = 2
    retryable_kinds: frozenset[ErrorKind] = field(default_factory=lambda: DEFAULT_RETRYABLE_KINDS)

    @classmethod
    def from_client_config(cls, config: ClientConfig) -> RetryConfig:
        return cls(
            max_retries=config.max_retries,
            backoff_ms=config.min_delay_between_retries_ms,
        )


def is_retryable_error(error: ApifyError, config: RetryConfig | None = None) -> bool:
    """
    Determine if a classified error should trigger a retry.

    Rate limits, 5xx, network failures and timeouts are transient; every
    other kind (validation, auth, not found, ...) will fail the same way
    again.
    """
    kinds = config.retryable_kinds if config else DEFAULT_RETRYABLE_KINDS
    return error.kind in kinds


def calculate_backoff_ms(attempt: int, config: RetryConfig) -> int:
    """
    Calculate backoff delay for a given attempt.

    Uses exponential backoff: delay = backoff_ms * base^attempt

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Backoff delay in milliseconds
    """
    delay = config.backoff_ms * (config.exponential_base**attempt)
    return min(delay, config.max_backoff_ms)


def retry_result(
    fn: Callable[..., Result[T]],
    config: RetryConfig,
    *args: Any,
    idempotent: bool = True,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> Result[T]:
    """
    Call ``fn`` until it succeeds, fails permanently, or retries run out.

    Args:
        fn: Function returning a Result
        config: Retry configuration
        *args: Positional arguments for fn
        idempotent: False disables retrying entirely
        sleep: Sleep function (seconds), injectable for tests
        **kwargs: Keyword arguments for fn

    Returns:
        The first successful Result, or the last failed one unchanged
    """
    max_retries = config.max_retries if idempotent else 0
    result = fn(*args, **kwargs)

    for attempt in range(max_retries):
        if result.ok or not is_retryable_error(result.error, config):  # type: ignore[arg-type]
            return result
        delay_ms = calculate_backoff_ms(attempt, config)
        logger.debug(f"Retry {attempt + 1}/{max_retries} after {delay_ms}ms: {result.error}")
        sleep(delay_ms / 1000)
        result = fn(*args, **kwargs)

    return result
