"""Commit resolved candidates into the live device queue."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from tunequeue.core.types import (
    CommitResult,
    FailureKind,
    PlaybackState,
    QueueFailure,
    Track,
)
from tunequeue.integrations.contracts import PlaybackDevice, device_error_code
from tunequeue.logging import get_logger
from tunequeue.logging_events import log_event
from tunequeue.utils.concurrency import gather_settled

logger = get_logger(__name__)

DEFAULT_PLAY_DELAY_SECONDS = 0.5


class QueueCommitCoordinator:
    """Apply the flush/queue/play decision table for one batch.

    ============== ===================== ===================
    device state   before queuing        after queuing
    ============== ===================== ===================
    stopped        flush existing queue  start playback
    paused         nothing               resume playback
    playing        nothing               nothing
    ============== ===================== ===================

    Every candidate is queued as an independent task. Per-item rejections are
    collected as :class:`QueueFailure` entries and never abort the batch.
    """

    def __init__(
        self,
        device: PlaybackDevice,
        *,
        concurrency: int = 8,
        region_error_codes: Sequence[str] = ("800",),
        play_delay_seconds: float = DEFAULT_PLAY_DELAY_SECONDS,
    ) -> None:
        self._device = device
        self._concurrency = max(1, concurrency)
        self._region_codes = frozenset(str(code) for code in region_error_codes)
        self._play_delay = max(0.0, play_delay_seconds)

    async def read_state(self) -> PlaybackState | None:
        try:
            raw = await self._device.get_current_state()
        except Exception as exc:
            logger.warning("Could not read playback state: %s", exc)
            return None
        state = PlaybackState.parse(raw)
        if state is None:
            logger.warning("Unknown playback state reported by device: %r", raw)
        return state

    def classify_failure(self, track: Track, exc: BaseException) -> QueueFailure:
        code = device_error_code(exc)
        kind = (
            FailureKind.REGION_RESTRICTION
            if code is not None and code in self._region_codes
            else FailureKind.QUEUE_FAILURE
        )
        return QueueFailure(track=track, kind=kind, error_code=code, message=str(exc))

    async def commit(
        self,
        candidates: Sequence[Track],
        state: PlaybackState | None,
        *,
        flush_when_stopped: bool = True,
        autoplay: bool = True,
    ) -> CommitResult:
        # an unreadable state is treated as playing so nothing gets flushed
        effective = state or PlaybackState.PLAYING
        flushed = False
        if effective is PlaybackState.STOPPED and flush_when_stopped:
            flushed = await self._flush()

        added = 0
        failures: list[QueueFailure] = []
        if candidates:
            settled = await gather_settled(
                list(candidates), self._queue_one, limit=self._concurrency
            )
            for outcome in settled:
                if outcome.ok:
                    added += 1
                    continue
                failure = self.classify_failure(outcome.item, outcome.error)
                logger.warning(
                    "Queue failed for %r by %s: %s%s",
                    failure.track.name,
                    failure.track.artist,
                    failure.message,
                    f" (error code: {failure.error_code})" if failure.error_code else "",
                )
                failures.append(failure)

        playback_started = False
        if autoplay and added > 0 and not effective.is_active:
            playback_started = await self._start_playback(effective)

        log_event(
            logger,
            "pipeline.commit",
            component="queue_commit",
            state=effective.value,
            requested=len(candidates),
            added=added,
            failed=len(failures),
            flushed=flushed,
            playback_started=playback_started,
        )
        return CommitResult(
            added=added,
            failures=tuple(failures),
            state=state,
            flushed=flushed,
            playback_started=playback_started,
        )

    async def _queue_one(self, track: Track) -> None:
        await self._device.queue(track.uri)

    async def _flush(self) -> bool:
        try:
            await self._device.flush()
        except Exception as exc:
            logger.warning("Could not flush queue: %s", exc)
            return False
        logger.info("Player stopped - queue flushed")
        return True

    async def _start_playback(self, state: PlaybackState) -> bool:
        try:
            if state is PlaybackState.STOPPED and self._play_delay:
                await asyncio.sleep(self._play_delay)
            await self._device.play()
        except Exception as exc:
            logger.warning("Could not start playback: %s", exc)
            return False
        logger.info("Started playback" if state is PlaybackState.STOPPED else "Resumed playback")
        return True


__all__ = ["QueueCommitCoordinator"]
