"""Retry with exponential backoff for connection setup."""

import asyncio
import functools
import logging
import random
from typing import Any, Callable, Type, TypeVar, Union

logger = logging.getLogger("ddl-sync.resilience")

T = TypeVar('T')


def with_retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retry_on: Union[Type[Exception], tuple] = (Exception,)
) -> Callable:
    """Decorator retrying an async callable with exponential backoff.

    Only the establishment of connections is retried; catalog queries
    fail the run on first error.

    Args:
        max_attempts: Maximum number of attempts.
        base_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for any single delay.
        exponential_base: Growth factor between consecutive delays.
        jitter: Whether to scale delays by a random factor in [0.5, 1.5).
        retry_on: Exception types that trigger a retry.

    Returns:
        Decorated coroutine function.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == max_attempts - 1:
                        raise

                    delay = min(base_delay * (exponential_base ** attempt), max_delay)
                    if jitter:
                        delay = delay * (0.5 + random.random())

                    logger.warning(
                        "Attempt %d/%d failed: %s. Retrying in %.2fs...",
                        attempt + 1, max_attempts, str(e), delay
                    )
                    await asyncio.sleep(delay)
            raise RuntimeError("with_retry requires max_attempts >= 1")

        return wrapper

    return decorator
