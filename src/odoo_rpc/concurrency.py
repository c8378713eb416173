"""
Async concurrency helpers.

The resolution engine fans out one pipeline per field (or per relation
spec). Those pipelines are joined all-or-fail: the first failure cancels
whatever is still in flight and is re-raised to the caller.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Iterable
from typing import TypeVar

T = TypeVar("T")


async def gather_all(aws: Iterable[Awaitable[T]]) -> list[T]:
    """
    Run awaitables concurrently and return their results in input order.

    If any of them raises, the still-pending siblings are cancelled and
    awaited before the first failure (in input order) is re-raised. If the
    caller itself is cancelled, every child is cancelled too.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    # Retrieve every exception so none is reported as "never retrieved".
    failures = [
        task.exception() for task in tasks if task.done() and not task.cancelled() and task.exception() is not None
    ]
    if failures:
        raise failures[0]
    return [task.result() for task in tasks]


__all__ = ["gather_all"]
