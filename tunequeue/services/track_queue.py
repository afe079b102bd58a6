"""High level resolve-and-queue operations exposed to the command layer."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace

from tunequeue.config import PipelineConfig
from tunequeue.core.blacklist import is_banned, partition_tracks
from tunequeue.core.boosters import QueryBooster
from tunequeue.core.dedupe import dedupe_tracks, keys_of
from tunequeue.core.errors import InvalidInputError
from tunequeue.core.queue_matching import find_duplicate, resolve_source
from tunequeue.core.ranking import rank_albums, rank_playlists, rank_tracks
from tunequeue.core.theme_mixer import mix_tracks, split_theme
from tunequeue.core.types import (
    Album,
    CommitResult,
    FailureKind,
    PlaybackState,
    Playlist,
    QueueFailure,
    QueueMatch,
    QueueOutcome,
    QueueSnapshot,
    SourceVerdict,
    Track,
)
from tunequeue.integrations.contracts import (
    BlacklistSource,
    CatalogError,
    CatalogSearch,
    PlaybackDevice,
)
from tunequeue.logging import get_logger
from tunequeue.logging_events import log_event
from tunequeue.services.queue_commit import QueueCommitCoordinator
from tunequeue.services.search_aggregator import MultiVariantSearchAggregator
from tunequeue.utils.spotify_url import is_catalog_reference, is_valid_track_uri

logger = get_logger(__name__)


def _failure_outcome(failures: Sequence[QueueFailure]) -> QueueOutcome:
    if failures and all(f.kind is FailureKind.REGION_RESTRICTION for f in failures):
        return QueueOutcome.REGION_RESTRICTED
    return QueueOutcome.QUEUE_FAILED


def _commit_outcome(result: CommitResult) -> QueueOutcome:
    if result.added > 0:
        return QueueOutcome.QUEUED
    return _failure_outcome(result.failures)


@dataclass(slots=True, frozen=True)
class BatchQueueResult:
    """Summary of a multi-track resolve-and-queue request.

    ``tracks`` holds the candidates handed to the device, ``skipped`` the
    banned candidates followed by those the device rejected.
    """

    outcome: QueueOutcome
    query: str
    added: int = 0
    tracks: tuple[Track, ...] = ()
    main_count: int = 0
    theme_count: int = 0
    applied_boosters: tuple[str, ...] = ()
    skipped: tuple[Track, ...] = ()
    duplicates: tuple[Track, ...] = ()
    failures: tuple[QueueFailure, ...] = ()

    @property
    def region_restricted(self) -> tuple[QueueFailure, ...]:
        return tuple(f for f in self.failures if f.kind is FailureKind.REGION_RESTRICTION)


@dataclass(slots=True, frozen=True)
class SingleQueueResult:
    outcome: QueueOutcome
    query: str
    track: Track | None = None
    duplicate: QueueMatch | None = None
    failure: QueueFailure | None = None
    state: PlaybackState | None = None

    @property
    def queued(self) -> bool:
        return self.outcome is QueueOutcome.QUEUED


@dataclass(slots=True, frozen=True)
class CollectionQueueResult:
    """Outcome of queuing a whole album or playlist."""

    outcome: QueueOutcome
    reference: str
    name: str | None = None
    uri: str | None = None
    total: int = 0
    added: int = 0
    tracks: tuple[Track, ...] = ()
    banned: tuple[Track, ...] = ()
    failures: tuple[QueueFailure, ...] = ()

    @property
    def skipped(self) -> tuple[Track, ...]:
        return self.banned + tuple(f.track for f in self.failures)

    @property
    def region_restricted(self) -> tuple[QueueFailure, ...]:
        return tuple(f for f in self.failures if f.kind is FailureKind.REGION_RESTRICTION)


class TrackQueueService:
    """Turn free text into queued tracks on the playback device.

    Blacklist entries, playback state and queue snapshots are read fresh for
    every call and never cached.
    """

    def __init__(
        self,
        *,
        catalog: CatalogSearch,
        device: PlaybackDevice,
        blacklist: BlacklistSource,
        aggregator: MultiVariantSearchAggregator,
        coordinator: QueueCommitCoordinator,
        config: PipelineConfig | None = None,
        booster: QueryBooster | None = None,
    ) -> None:
        self._catalog = catalog
        self._device = device
        self._blacklist = blacklist
        self._aggregator = aggregator
        self._coordinator = coordinator
        self._config = config or PipelineConfig()
        self._booster = booster or QueryBooster()

    async def search_and_queue(
        self,
        query: str,
        count: int,
        *,
        theme: str | None = None,
        theme_percentage: int | None = None,
        use_theme: bool = True,
        autoplay: bool | None = None,
    ) -> BatchQueueResult:
        """Resolve ``count`` tracks for ``query``, sprinkle in theme tracks and queue them."""

        text = (query or "").strip()
        if not text:
            raise InvalidInputError("Search query must not be empty.")
        if count < 0:
            raise InvalidInputError("Requested track count must not be negative.")

        boosted = self._booster.boost(text)
        if boosted.applied_boosters:
            log_event(
                logger,
                "pipeline.booster",
                component="track_queue",
                query=text,
                boosted_query=boosted.query,
                applied=",".join(boosted.applied_boosters),
            )

        theme_text = (theme if theme is not None else self._config.default_theme) or ""
        if not use_theme:
            theme_text = ""
        percentage = (
            theme_percentage if theme_percentage is not None else self._config.theme_percentage
        )
        split = split_theme(count, percentage, theme=theme_text)

        main_raw = await self._aggregator.search(boosted.query, split.main_count)
        main_tracks = dedupe_tracks(main_raw)[: split.main_count]

        theme_tracks: list[Track] = []
        if split.theme_count > 0:
            theme_raw = await self._aggregator.search_theme(theme_text, split.theme_count)
            theme_tracks = dedupe_tracks(theme_raw, keys_of(main_tracks))[: split.theme_count]

        base = BatchQueueResult(
            outcome=QueueOutcome.NOTHING_FOUND,
            query=boosted.query,
            main_count=len(main_tracks),
            theme_count=len(theme_tracks),
            applied_boosters=boosted.applied_boosters,
        )
        mixed = mix_tracks(main_tracks, theme_tracks, count)
        if not mixed:
            return base

        partition = partition_tracks(mixed, self._blacklist.load())
        if partition.all_banned:
            logger.info("All %d candidates for %r are blacklisted", len(mixed), text)
            return replace(base, outcome=QueueOutcome.ALL_BLACKLISTED, skipped=partition.banned)

        state, snapshot = await self._read_device()
        candidates: list[Track] = []
        duplicates: list[Track] = []
        for track in partition.allowed:
            # a stopped device gets flushed, so its queue cannot hold duplicates
            if state is not PlaybackState.STOPPED and find_duplicate(track, snapshot) is not None:
                duplicates.append(track)
            else:
                candidates.append(track)
        if not candidates:
            return replace(
                base,
                outcome=QueueOutcome.DUPLICATE,
                skipped=partition.banned,
                duplicates=tuple(duplicates),
            )

        result = await self._coordinator.commit(
            candidates, state, autoplay=self._autoplay(autoplay)
        )
        return replace(
            base,
            outcome=_commit_outcome(result),
            added=result.added,
            tracks=tuple(candidates),
            skipped=partition.banned + result.failed_tracks,
            duplicates=tuple(duplicates),
            failures=result.failures,
        )

    async def add_track(self, query: str, *, autoplay: bool | None = None) -> SingleQueueResult:
        """Queue the best catalog match for ``query``, flushing a stopped queue first."""

        return await self._queue_best_match(query, append=False, autoplay=autoplay)

    async def append_track(self, query: str, *, autoplay: bool | None = None) -> SingleQueueResult:
        """Like :meth:`add_track` but never flushes the existing queue."""

        return await self._queue_best_match(query, append=True, autoplay=autoplay)

    async def add_album(
        self, reference: str, *, autoplay: bool | None = None
    ) -> CollectionQueueResult:
        text = (reference or "").strip()
        if not text:
            raise InvalidInputError("Album reference must not be empty.")
        album = await self._resolve_album(text)
        if album is None:
            return CollectionQueueResult(outcome=QueueOutcome.NOTHING_FOUND, reference=text)
        tracks = await self._fetch_tracks(self._catalog.get_album_tracks, album.uri)
        return await self._queue_collection(text, album.name, album.uri, tracks, autoplay)

    async def add_playlist(
        self, reference: str, *, autoplay: bool | None = None
    ) -> CollectionQueueResult:
        text = (reference or "").strip()
        if not text:
            raise InvalidInputError("Playlist reference must not be empty.")
        playlist = await self._resolve_playlist(text)
        if playlist is None:
            return CollectionQueueResult(outcome=QueueOutcome.NOTHING_FOUND, reference=text)
        tracks = await self._fetch_tracks(self._catalog.get_playlist_tracks, playlist.uri)
        return await self._queue_collection(text, playlist.name, playlist.uri, tracks, autoplay)

    async def current_source(self) -> SourceVerdict | None:
        """Attribute what is playing to the managed queue or an external source."""

        current = await self._device.get_current_track()
        if current is None or not current.title:
            return None
        snapshot = await self._read_snapshot()
        verdict = resolve_source(current, snapshot)
        log_event(
            logger,
            "pipeline.source",
            component="track_queue",
            source=verdict.type.value,
            position=verdict.position,
            reported_position=current.queue_position,
            position_mismatch=verdict.position_mismatch,
        )
        return verdict

    def _autoplay(self, override: bool | None) -> bool:
        return self._config.autoplay if override is None else override

    async def _queue_best_match(
        self, query: str, *, append: bool, autoplay: bool | None
    ) -> SingleQueueResult:
        text = (query or "").strip()
        if not text:
            raise InvalidInputError("Search query must not be empty.")

        found = await self._aggregator.lookup(text, self._config.single_add_candidates)
        ranked = [track for track in rank_tracks(found, text) if is_valid_track_uri(track.uri)]
        if not ranked:
            return SingleQueueResult(outcome=QueueOutcome.NOTHING_FOUND, query=text)

        best = ranked[0]
        if is_banned(best.name, best.artist, self._blacklist.load()):
            logger.info("Refusing blacklisted track %r by %s", best.name, best.artist)
            return SingleQueueResult(outcome=QueueOutcome.BLACKLISTED, query=text, track=best)

        state, snapshot = await self._read_device()
        if append or state is not PlaybackState.STOPPED:
            match = find_duplicate(best, snapshot)
            if match is not None:
                logger.info("%r is already queued at position %d", best.name, match.position)
                return SingleQueueResult(
                    outcome=QueueOutcome.DUPLICATE,
                    query=text,
                    track=best,
                    duplicate=match,
                    state=state,
                )

        result = await self._coordinator.commit(
            [best],
            state,
            flush_when_stopped=not append,
            autoplay=self._autoplay(autoplay),
        )
        return SingleQueueResult(
            outcome=_commit_outcome(result),
            query=text,
            track=best,
            failure=result.failures[0] if result.failures else None,
            state=state,
        )

    async def _queue_collection(
        self,
        reference: str,
        name: str,
        uri: str,
        tracks: list[Track],
        autoplay: bool | None,
    ) -> CollectionQueueResult:
        playable = [track for track in tracks if is_valid_track_uri(track.uri)]
        base = CollectionQueueResult(
            outcome=QueueOutcome.NOTHING_FOUND,
            reference=reference,
            name=name,
            uri=uri,
            total=len(playable),
        )
        if not playable:
            return base

        partition = partition_tracks(playable, self._blacklist.load())
        if partition.all_banned:
            logger.info("Every track of %r is blacklisted", name)
            return replace(
                base, outcome=QueueOutcome.ALL_BLACKLISTED, banned=partition.banned
            )

        state = await self._coordinator.read_state()
        result = await self._coordinator.commit(
            partition.allowed, state, autoplay=self._autoplay(autoplay)
        )
        return replace(
            base,
            outcome=_commit_outcome(result),
            added=result.added,
            tracks=partition.allowed,
            banned=partition.banned,
            failures=result.failures,
        )

    async def _resolve_album(self, reference: str) -> Album | None:
        try:
            if is_catalog_reference(reference, "album"):
                return await self._catalog.get_album(reference)
            albums = await self._catalog.search_albums(reference, self._config.album_search_limit)
        except CatalogError as exc:
            logger.warning("Album lookup for %r failed: %s", reference, exc)
            return None
        ranked = rank_albums(albums, reference)
        return ranked[0] if ranked else None

    async def _resolve_playlist(self, reference: str) -> Playlist | None:
        try:
            if is_catalog_reference(reference, "playlist"):
                return await self._catalog.get_playlist(reference)
            playlists = await self._catalog.search_playlists(
                reference, self._config.playlist_search_limit
            )
        except CatalogError as exc:
            logger.warning("Playlist lookup for %r failed: %s", reference, exc)
            return None
        ranked = rank_playlists(playlists, reference)
        return ranked[0] if ranked else None

    async def _fetch_tracks(
        self, fetch: Callable[[str], Awaitable[list[Track]]], uri: str
    ) -> list[Track]:
        try:
            return list(await fetch(uri))
        except CatalogError as exc:
            logger.warning("Fetching tracks of %s failed: %s", uri, exc)
            return []

    async def _read_snapshot(self) -> QueueSnapshot | None:
        try:
            return await self._device.get_queue()
        except Exception as exc:
            logger.warning("Could not read device queue: %s", exc)
            return None

    async def _read_device(self) -> tuple[PlaybackState | None, QueueSnapshot | None]:
        state, snapshot = await asyncio.gather(
            self._coordinator.read_state(), self._read_snapshot()
        )
        return state, snapshot


__all__ = [
    "BatchQueueResult",
    "CollectionQueueResult",
    "SingleQueueResult",
    "TrackQueueService",
]
