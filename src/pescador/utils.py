"""
Internal utility functions for pescador.
"""

import asyncio
from typing import (
    Any,
    Awaitable,
    Callable,
    Optional,
    TypeVar,
)

from .exceptions import UpstreamTimeout

R = TypeVar("R")


def add_sync_version(
    async_fn: Callable[..., Awaitable[R]],
) -> Callable[..., Awaitable[R]]:
    """
    A decorator that adds a .sync attribute to an async function, allowing it
    to be called synchronously.

    The .sync version runs the async function in a new asyncio event loop.

    Example:
        >>> @add_sync_version
        ... async def my_async_func(x):
        ...     return x * 2

        >>> # Async usage
        >>> result = await my_async_func(5)

        >>> # Sync usage
        >>> result = my_async_func.sync(5)
    """
    # Import here to avoid circular imports
    from .sync import AsyncSyncBridge

    def sync_wrapper(*args: Any, **kwargs: Any) -> R:
        """Synchronous wrapper for the async function."""
        return AsyncSyncBridge.run_async(async_fn, args=args, kwargs=kwargs)

    async_fn.sync = sync_wrapper  # type: ignore
    return async_fn


async def with_deadline(awaitable: Awaitable[R], timeout: Optional[float]) -> R:
    """
    Await ``awaitable``, cancelling it after ``timeout`` seconds.

    Raises:
        UpstreamTimeout: If the deadline expires first
    """
    if timeout is None:
        return await awaitable
    if timeout <= 0:
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise ValueError(f"timeout must be positive, got {timeout}")
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as e:
        raise UpstreamTimeout(f"Operation did not complete within {timeout}s") from e
