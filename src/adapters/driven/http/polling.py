"""Polling of an async check until it stops failing."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TypeVar

import aiohttp

__all__ = ["poll_immediate", "NOT_READY_ERRORS"]

logger = logging.getLogger(__name__)

# Exceptions meaning "not ready yet": the target did not answer at all
NOT_READY_ERRORS = (
    aiohttp.ClientError,  # Connection refused, DNS failed, broken payload
    asyncio.TimeoutError,  # No answer within the attempt timeout
    OSError,  # OS-level network error
)

T = TypeVar("T")
AsyncFn = Callable[..., Awaitable[T]]


def poll_immediate(
    interval_sec: float = 0.1,
    timeout_sec: float = 60,
) -> Callable[[AsyncFn[T]], AsyncFn[T]]:
    """Decorate an async check so it is polled until it succeeds.

    The check runs immediately, then every ``interval_sec`` while it raises
    one of NOT_READY_ERRORS. Any other error is propagated at once.

    Args:
        interval_sec: Pause between attempts in seconds.
        timeout_sec: Overall bound in seconds.

    Returns:
        Decorator function.

    Raises:
        asyncio.TimeoutError: From the decorated function, once the bound
            has elapsed without a successful attempt.

    Example:
        @poll_immediate(interval_sec=0.1, timeout_sec=60)
        async def head():
            return await session.head(url)
    """

    def decorator(func: AsyncFn[T]) -> AsyncFn[T]:
        @wraps(func)
        async def wrapper(*args: object, **kwargs: object) -> T:
            loop = asyncio.get_running_loop()
            deadline = loop.time() + timeout_sec
            attempts = 0

            while True:
                attempts += 1
                try:
                    return await func(*args, **kwargs)
                except NOT_READY_ERRORS as e:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        logger.debug(f"Polling gave up after {attempts} attempts: {e}")
                        raise asyncio.TimeoutError(
                            f"not ready after {timeout_sec}s ({attempts} attempts): {e}"
                        ) from e
                    await asyncio.sleep(min(interval_sec, remaining))

        return wrapper

    return decorator
