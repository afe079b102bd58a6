"""Factories wiring the pipeline together from configuration."""

from __future__ import annotations

from functools import lru_cache

from tunequeue.config import AppConfig, load_config
from tunequeue.core.boosters import QueryBooster
from tunequeue.integrations.contracts import BlacklistSource, CatalogSearch, PlaybackDevice
from tunequeue.logging import get_logger
from tunequeue.services.blacklist_store import JsonBlacklistStore
from tunequeue.services.queue_commit import QueueCommitCoordinator
from tunequeue.services.search_aggregator import MultiVariantSearchAggregator
from tunequeue.services.track_queue import TrackQueueService

logger = get_logger(__name__)


@lru_cache
def get_app_config() -> AppConfig:
    return load_config()


def build_catalog(config: AppConfig) -> CatalogSearch:
    from tunequeue.integrations.spotify_catalog import SpotifyCatalog

    return SpotifyCatalog(config.spotify, result_cap=config.pipeline.search_result_cap)


def build_track_queue_service(
    device: PlaybackDevice,
    *,
    config: AppConfig | None = None,
    catalog: CatalogSearch | None = None,
    blacklist: BlacklistSource | None = None,
) -> TrackQueueService:
    """Assemble a :class:`TrackQueueService` for ``device``.

    The catalog defaults to Spotify and the blacklist to the JSON store named
    by ``TRACK_BLACKLIST_PATH``.
    """

    config = config or get_app_config()
    pipeline = config.pipeline
    catalog = catalog or build_catalog(config)
    blacklist = blacklist or JsonBlacklistStore(config.blacklist.path)
    aggregator = MultiVariantSearchAggregator(
        catalog,
        policy=config.catalog_policy,
        result_cap=pipeline.search_result_cap,
        year_tokens=pipeline.year_tokens,
    )
    coordinator = QueueCommitCoordinator(
        device,
        concurrency=pipeline.batch_concurrency,
        region_error_codes=pipeline.region_error_codes,
    )
    logger.debug(
        "Track queue service configured (catalog=%s, theme=%r at %d%%)",
        getattr(catalog, "name", "catalog"),
        pipeline.default_theme,
        pipeline.theme_percentage,
    )
    return TrackQueueService(
        catalog=catalog,
        device=device,
        blacklist=blacklist,
        aggregator=aggregator,
        coordinator=coordinator,
        config=pipeline,
        booster=QueryBooster(),
    )


__all__ = ["build_catalog", "build_track_queue_service", "get_app_config"]
