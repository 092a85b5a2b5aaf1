"""Run blocking client calls from asyncio code.

The WriteFreely and Gemini clients are synchronous; ``SyncEngine.run_async``
moves each call onto a worker thread and bounds how many run at once with
a semaphore it owns for the duration of the run.
"""

import asyncio
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_sync(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Call ``func(*args, **kwargs)`` on a worker thread and await the result."""
    return await asyncio.to_thread(func, *args, **kwargs)


async def run_bounded(
    semaphore: asyncio.Semaphore,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Like ``run_sync``, but only once a slot on *semaphore* is free.

    Example:
        slots = asyncio.Semaphore(4)
        outcomes = await asyncio.gather(
            *(run_bounded(slots, publish, entry) for entry in entries)
        )
    """
    async with semaphore:
        return await asyncio.to_thread(func, *args, **kwargs)
