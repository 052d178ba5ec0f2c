"""Retry and timeout policy for collaborator calls.

Every call to the graph source or the detail source goes through
call_source_with_retry(), which applies a per-attempt timeout and retries
transient failures with exponential backoff using tenacity. Response shape
problems (FormatError) are not transient and are raised immediately.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (AsyncRetrying, before_sleep_log,
                      retry_if_not_exception_type, stop_after_attempt,
                      wait_exponential)

from src.config import Config, get_config
from src.exceptions.fetch_error import FetchError, FormatError

logger = logging.getLogger(__name__)

# Type variable for the collaborator result
T = TypeVar("T")


async def call_source_with_retry(
    operation: str,
    call: Callable[[], Awaitable[T]],
    config: Config | None = None,
) -> T:
    """Invoke a collaborator with timeout and retry.

    Configuration is loaded from Config:
    - source_timeout: Seconds allowed per attempt
    - source_retry_attempts: Maximum number of attempts
    - source_retry_backoff_min / source_retry_backoff_max: Backoff bounds

    Args:
        operation: Name of the collaborator operation, used in logs and error context
        call: Zero-argument coroutine factory; called once per attempt
        config: Optional Config instance. If not provided, uses get_config()

    Returns:
        Whatever the successful attempt returned

    Raises:
        FormatError: Immediately, when an attempt raises one
        FetchError: When every attempt failed or timed out
    """
    config = config or get_config()

    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(config.source_retry_attempts),
            wait=wait_exponential(
                multiplier=config.source_retry_backoff_min,
                min=config.source_retry_backoff_min,
                max=config.source_retry_backoff_max,
            ),
            retry=retry_if_not_exception_type(FormatError),
            reraise=True,
            before_sleep=before_sleep_log(logger, logging.WARNING),
        ):
            with attempt:
                return await asyncio.wait_for(call(), timeout=config.source_timeout)

        # This should never be reached, AsyncRetrying returns or raises
        raise FetchError(f"{operation} ended without a result")

    except FormatError:
        raise
    except asyncio.TimeoutError as e:
        raise FetchError(
            f"{operation} timed out after {config.source_timeout}s",
            context={
                "operation": operation,
                "timeout": config.source_timeout,
                "retry_attempts": config.source_retry_attempts,
            },
        ) from e
    except Exception as e:
        raise FetchError(
            f"{operation} failed after {config.source_retry_attempts} attempt(s)",
            context={
                "operation": operation,
                "error": str(e),
                "error_type": type(e).__name__,
                "retry_attempts": config.source_retry_attempts,
            },
        ) from e
