import asyncio
from contextlib import suppress
from typing import Awaitable, TypeVar

from fastapi import Request

from traxit.core.errors import ClientDisconnectedError

T = TypeVar("T")

POLL_INTERVAL = 0.5

async def run_until_disconnected(
    request: Request,
    work: Awaitable[T],
    poll_interval: float = POLL_INTERVAL
) -> T:
    """
    Await ``work`` while watching the client connection.

    If the client goes away first, the work is cancelled (which kills any
    running subprocess) and ``ClientDisconnectedError`` is raised.
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if task in done:
                return task.result()
            if await request.is_disconnected():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
                raise ClientDisconnectedError("client went away during processing")
    finally:
        if not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
