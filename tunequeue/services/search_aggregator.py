"""Fan a query out into catalog variants and accumulate raw candidates."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from time import perf_counter

from tunequeue.config import ExternalCallPolicy
from tunequeue.core.types import Track
from tunequeue.integrations.contracts import (
    CatalogError,
    CatalogSearch,
    CatalogTimeoutError,
)
from tunequeue.logging import get_logger
from tunequeue.logging_events import log_event
from tunequeue.utils.retry import RetryDirective, catalog_retry_directive, with_retry

logger = get_logger(__name__)

# Over-fetch factor: the deduplicator and ranker need spare raw material.
OVERFETCH_FACTOR = 2


def build_query_variants(query: str, year_tokens: Sequence[str] = ()) -> list[str]:
    base = (query or "").strip()
    if not base:
        return []
    variants = [base]
    variants.extend(f"{base} {token}" for token in year_tokens if str(token).strip())
    variants.append(f"{base} classic")
    variants.append(f"{base} best")
    return variants


def build_theme_variants(theme: str) -> list[str]:
    base = (theme or "").strip()
    if not base:
        return []
    return [base, f"{base} music", f"{base} hits", f"{base} playlist"]


@dataclass(slots=True, frozen=True)
class VariantOutcome:
    query: str
    result_count: int = 0
    error: CatalogError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True, frozen=True)
class AggregatedSearch:
    tracks: tuple[Track, ...]
    variants: tuple[VariantOutcome, ...]

    @property
    def status(self) -> str:
        if not self.variants:
            return "skipped"
        successes = sum(1 for variant in self.variants if variant.ok)
        if successes == len(self.variants):
            return "ok"
        if successes == 0:
            return "failed"
        return "partial"


class MultiVariantSearchAggregator:
    """Issue query variants one at a time until enough raw tracks arrived.

    A failing variant is logged and skipped; it never aborts the aggregation.
    """

    def __init__(
        self,
        catalog: CatalogSearch,
        *,
        policy: ExternalCallPolicy,
        result_cap: int = 50,
        year_tokens: Sequence[str] = (),
    ) -> None:
        self._catalog = catalog
        self._policy = policy
        self._result_cap = max(1, result_cap)
        self._year_tokens = tuple(year_tokens)

    async def search(self, query: str, target_count: int) -> list[Track]:
        variants = build_query_variants(query, self._year_tokens)
        result = await self.collect(variants, target_count)
        return list(result.tracks)

    async def search_theme(self, theme: str, target_count: int) -> list[Track]:
        result = await self.collect(build_theme_variants(theme), target_count)
        return list(result.tracks)

    async def collect(self, variants: Sequence[str], target_count: int) -> AggregatedSearch:
        goal = max(0, int(target_count)) * OVERFETCH_FACTOR
        accumulated: list[Track] = []
        outcomes: list[VariantOutcome] = []
        for variant in variants:
            if len(accumulated) >= goal:
                break
            try:
                tracks = await self._search_variant(variant)
            except CatalogError as exc:
                logger.warning("Search variant %r failed: %s", variant, exc)
                outcomes.append(VariantOutcome(query=variant, error=exc))
                continue
            accumulated.extend(tracks)
            outcomes.append(VariantOutcome(query=variant, result_count=len(tracks)))
            logger.info(
                "Search %r returned %d results (total: %d)", variant, len(tracks), len(accumulated)
            )

        result = AggregatedSearch(tracks=tuple(accumulated), variants=tuple(outcomes))
        log_event(
            logger,
            "pipeline.search",
            component="search_aggregator",
            status=result.status,
            target_count=int(target_count),
            result_count=len(accumulated),
            meta={"variants": [outcome.query for outcome in outcomes]},
        )
        return result

    async def lookup(self, query: str, limit: int) -> list[Track]:
        """Run a single catalog search, returning an empty list on failure."""

        try:
            return await self._search_variant(query, limit=limit)
        except CatalogError as exc:
            logger.warning("Search %r failed: %s", query, exc)
            return []

    async def _search_variant(self, variant: str, *, limit: int | None = None) -> list[Track]:
        policy = self._policy
        cap = self._result_cap if limit is None else max(1, min(int(limit), self._result_cap))
        attempts = max(1, policy.retry_max + 1)
        attempt_counter = 0
        started = perf_counter()

        async def _call() -> list[Track]:
            nonlocal attempt_counter
            attempt_counter += 1
            return list(await self._catalog.search_tracks(variant, cap))

        def _classify(exc: Exception) -> RetryDirective:
            return catalog_retry_directive(self._normalise_error(exc))

        try:
            tracks = await with_retry(
                _call,
                attempts=attempts,
                base_ms=policy.backoff_base_ms,
                jitter_pct=policy.jitter_pct,
                timeout_ms=policy.timeout_ms,
                classify_err=_classify,
            )
        except CatalogError as exc:
            self._log_call(variant, "error", attempt_counter, started, exc)
            raise
        self._log_call(variant, "ok", attempt_counter, started)
        return tracks

    def _normalise_error(self, exc: Exception) -> CatalogError:
        name = getattr(self._catalog, "name", "catalog")
        if isinstance(exc, CatalogError):
            return exc
        if isinstance(exc, asyncio.TimeoutError):
            return CatalogTimeoutError(name, self._policy.timeout_ms, cause=exc)
        return CatalogError(name, f"{name} search failed: {exc}", cause=exc)

    def _log_call(
        self,
        variant: str,
        status: str,
        attempts: int,
        started: float,
        error: CatalogError | None = None,
    ) -> None:
        meta: dict[str, object] = {"attempts": attempts}
        if error is not None:
            meta["error"] = error.__class__.__name__
            if error.status_code is not None:
                meta["status_code"] = error.status_code
        log_event(
            logger,
            "catalog.call",
            component="search_aggregator",
            dependency=getattr(self._catalog, "name", "catalog"),
            operation="search_tracks",
            variant=variant,
            status=status,
            duration_ms=int((perf_counter() - started) * 1000),
            meta=meta,
        )


__all__ = [
    "AggregatedSearch",
    "MultiVariantSearchAggregator",
    "VariantOutcome",
    "build_query_variants",
    "build_theme_variants",
]
