"""Concurrent fan-out over independent fetches, all or nothing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Iterable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_all_or_nothing(*branches: Awaitable[T]) -> list[T]:
    """Run ``branches`` concurrently and return their results in order.

    The first branch to raise fails the whole fan-out. Every branch still
    running is cancelled and awaited before that exception propagates, so
    nothing keeps fetching on behalf of a caller that already failed.

    Args:
        *branches: Independent awaitables.

    Returns:
        The branch results, in the order the branches were given.

    Raises:
        Exception: The first failure among the branches.
    """
    tasks = [asyncio.ensure_future(branch) for branch in branches]
    if not tasks:
        return []

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        await _cancel(tasks)
        raise

    if pending:
        logger.warning("Cancelling %d branch(es) after a failed fetch", len(pending))
        await _cancel(pending)

    failures = [task.exception() for task in tasks if task in done]
    for failure in failures:
        if failure is not None:
            raise failure
    return [task.result() for task in tasks]


async def _cancel(tasks: Iterable[asyncio.Future]) -> None:
    tasks = list(tasks)
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
