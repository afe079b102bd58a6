"""Retry and backoff helpers for catalog calls."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import random
from typing import Awaitable, Callable, TypeVar

from tunequeue.integrations.contracts import (
    CatalogError,
    CatalogRateLimitedError,
    CatalogTimeoutError,
)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryDirective:
    """Instruction returned from ``classify_err`` for ``with_retry``."""

    retry: bool
    delay_override_ms: int | None = None
    error: Exception | None = None


AsyncFactory = Callable[[], Awaitable[T]]
Classifier = Callable[[Exception], RetryDirective | bool]


def backoff_delays(base_ms: int, max_attempts: int) -> list[int]:
    """Nominal exponential delays in milliseconds, one per attempt."""

    base = max(1, int(base_ms))
    return [base * (2**index) for index in range(max(0, int(max_attempts)))]


def _resolve_directive(result: RetryDirective | bool, error: Exception) -> RetryDirective:
    if isinstance(result, RetryDirective):
        return RetryDirective(
            retry=bool(result.retry),
            delay_override_ms=(
                max(0, int(result.delay_override_ms))
                if result.delay_override_ms is not None
                else None
            ),
            error=result.error if result.error is not None else error,
        )
    if isinstance(result, bool):
        return RetryDirective(retry=result, error=error)
    raise TypeError("classify_err must return a boolean or RetryDirective")


def catalog_retry_directive(error: CatalogError) -> RetryDirective:
    """Retry catalog timeouts and rate limits; honour a server supplied back-off."""

    if isinstance(error, CatalogRateLimitedError):
        return RetryDirective(retry=True, delay_override_ms=error.retry_after_ms, error=error)
    return RetryDirective(retry=isinstance(error, CatalogTimeoutError), error=error)


def _jitter_delay_ms(delay_ms: int, jitter_pct: float) -> float:
    delay = max(0, int(delay_ms))
    pct = max(0.0, float(jitter_pct))
    if delay <= 0 or pct <= 0:
        return float(delay)
    spread = delay * pct / 100.0
    return random.uniform(max(0.0, delay - spread), delay + spread)


async def with_retry(
    async_fn: AsyncFactory[T],
    *,
    attempts: int,
    base_ms: int,
    jitter_pct: float,
    timeout_ms: int | None,
    classify_err: Classifier,
) -> T:
    """Await ``async_fn()`` up to ``attempts`` times with exponential backoff.

    Each attempt is bounded by ``timeout_ms``. ``classify_err`` decides per
    failure whether another attempt is worthwhile; the error it returns (or
    the original one) is raised once attempts are exhausted.
    """

    max_attempts = max(1, int(attempts))
    delays = backoff_delays(base_ms, max_attempts)
    timeout = int(timeout_ms) if timeout_ms is not None else None

    for attempt in range(1, max_attempts + 1):
        try:
            call = async_fn()
            if timeout is not None and timeout > 0:
                return await asyncio.wait_for(call, timeout / 1000.0)
            return await call
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            directive = _resolve_directive(classify_err(exc), exc)
            if not directive.retry or attempt >= max_attempts:
                if directive.error is exc:
                    raise
                raise directive.error from exc

            delay_ms = directive.delay_override_ms
            if delay_ms is None:
                delay_ms = delays[attempt - 1]
            wait_ms = _jitter_delay_ms(delay_ms, jitter_pct)
            if wait_ms > 0:
                await asyncio.sleep(wait_ms / 1000.0)
    raise RuntimeError("Retry loop exited unexpectedly")


__all__ = ["RetryDirective", "backoff_delays", "catalog_retry_directive", "with_retry"]
