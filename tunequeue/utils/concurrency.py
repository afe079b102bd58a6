"""Concurrency primitives shared across tunequeue services."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")

__all__ = ["Settled", "gather_settled"]


@dataclass(slots=True, frozen=True)
class Settled(Generic[T, R]):
    """Outcome of one task in a settle-all batch."""

    item: T
    value: R | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def gather_settled(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    limit: int,
) -> list[Settled[T, R]]:
    """Run ``worker`` for every item concurrently, at most ``limit`` at a time.

    A failing task never cancels its siblings; each result records either the
    value or the exception, in the order of ``items``.
    """

    semaphore = asyncio.Semaphore(max(1, int(limit)))

    async def _run(item: T) -> R:
        async with semaphore:
            return await worker(item)

    tasks = [asyncio.create_task(_run(item)) for item in items]
    gathered = await asyncio.gather(*tasks, return_exceptions=True)
    results: list[Settled[T, R]] = []
    for item, outcome in zip(items, gathered):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            results.append(Settled(item=item, error=outcome))
        else:
            results.append(Settled(item=item, value=outcome))
    return results
