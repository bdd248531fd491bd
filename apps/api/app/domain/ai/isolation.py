"""Run a coroutine on a worker thread that owns a private event loop.

Provider clients built on ``httpx.AsyncClient`` are bound to the loop they
were created on and must not be shared between requests. ``run_isolated``
hands a coroutine function to one of anyio's worker threads; the thread
creates a fresh loop with ``asyncio.run``, drives the coroutine to completion,
closes the loop and returns the result. Everything the coroutine creates
stays on that thread, and the server loop only awaits the thread.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import anyio.to_thread

T = TypeVar("T")


def _drive(async_fn: Callable[..., Awaitable[T]], args: tuple[Any, ...]) -> T:
    return asyncio.run(async_fn(*args))


async def run_isolated(async_fn: Callable[..., Awaitable[T]], *args: Any) -> T:
    # The caller may be cancelled while the worker is still running; the
    # worker is then left to finish on its own loop.
    return await anyio.to_thread.run_sync(_drive, async_fn, args, abandon_on_cancel=True)
