"""
Optimistic transaction retry decorator.

Redis raises WatchError from EXEC when a watched key was modified by another
client between our read and our MULTI/EXEC. The decorated coroutine is
re-run from scratch with exponential backoff + jitter.
"""

import asyncio
import functools
import random
from typing import Any, Awaitable, Callable, TypeVar

from redis.exceptions import WatchError

from pizzeria.config import get_settings
from pizzeria.errors import ConcurrencyConflict
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def with_optimistic_retry(
    max_retries: int | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Retry an async WATCH/MULTI/EXEC transaction on conflict.

    Usage:
        @with_optimistic_retry()
        async def reserve(self, ...):
            ...
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            settings = get_settings()
            attempts = max_retries or settings.max_retries
            attempt = 0
            while True:
                attempt += 1
                try:
                    return await func(*args, **kwargs)
                except WatchError:
                    if attempt >= attempts:
                        logger.error(
                            "optimistic_retry_exhausted",
                            operation=func.__name__,
                            attempts=attempts,
                        )
                        raise ConcurrencyConflict(
                            f"Concurrent update detected in {func.__name__}; please retry"
                        )
                    delay = min(settings.retry_delay * (2 ** attempt), settings.retry_max_delay)
                    delay += random.uniform(0, settings.retry_delay)
                    logger.warning(
                        "optimistic_retry",
                        operation=func.__name__,
                        attempt=attempt,
                        delay_s=round(delay, 3),
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
