"""
Tie long-running request work to the client connection.

Aggregation fans out to many GitHub (and Claude) calls. If the client
disconnects, run_until_disconnect() cancels the work task; cancellation then
propagates through every asyncio.gather in the pipeline.
"""

import asyncio
import contextlib
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

from fastapi import Request

from app.core.exceptions import ClientDisconnectedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.5


async def run_until_disconnect(
    request: Request,
    work: Coroutine[Any, Any, T],
    poll_interval: float = DISCONNECT_POLL_SECONDS,
) -> T:
    """
    Await work, cancelling it if the client disconnects first.

    Raises:
        ClientDisconnectedError: The client disconnected and work was cancelled
    """
    task = asyncio.ensure_future(work)
    disconnected = False

    async def watch() -> None:
        nonlocal disconnected
        while not task.done():
            if await request.is_disconnected():
                disconnected = True
                logger.info(f"Client disconnected, cancelling {request.url.path}")
                task.cancel()
                return
            await asyncio.sleep(poll_interval)

    watcher = asyncio.ensure_future(watch())
    try:
        return await task
    except asyncio.CancelledError:
        if disconnected:
            raise ClientDisconnectedError(request.url.path) from None
        raise
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher
