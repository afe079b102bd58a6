"""Content based identification of items in a borrowed queue snapshot.

The device exposes only position, title, artist and URI for queue entries, and
its own position bookkeeping drifts once another controller reorders or
consumes the queue. Every verdict here is computed from the snapshot passed in
and is stale by the time a write follows it.
"""

from __future__ import annotations

from tunequeue.utils.text_normalization import dedup_key

from .types import CurrentTrack, QueueItem, QueueMatch, QueueSnapshot, SourceVerdict, Track


def _same_title_artist(item: QueueItem, title: str, artist: str) -> bool:
    return (
        item.title.casefold() == (title or "").strip().casefold()
        and item.artist.casefold() == (artist or "").strip().casefold()
    )


def find_duplicate(candidate: Track, snapshot: QueueSnapshot | None) -> QueueMatch | None:
    """Return the first queue entry sharing ``candidate``'s URI or DedupKey."""

    if snapshot is None or not snapshot.items:
        return None
    candidate_key = dedup_key(candidate.name, candidate.artist)
    for index, item in enumerate(snapshot.items):
        if candidate.uri and item.uri == candidate.uri:
            return QueueMatch(index=index, matched_by="uri")
        if item.title and dedup_key(item.title, item.artist) == candidate_key:
            return QueueMatch(index=index, matched_by="title_artist")
    return None


def find_in_queue(snapshot: QueueSnapshot | None, title: str, artist: str) -> QueueMatch | None:
    if snapshot is None:
        return None
    for index, item in enumerate(snapshot.items):
        if _same_title_artist(item, title, artist):
            return QueueMatch(index=index, matched_by="title_artist")
    return None


def resolve_source(current: CurrentTrack, snapshot: QueueSnapshot | None) -> SourceVerdict:
    """Decide whether ``current`` is playing from the managed queue.

    The device reported position is trusted only when the snapshot entry at
    that position carries the same title and artist. Otherwise the snapshot is
    scanned, and failing that the track is attributed to an external source.
    """

    items = snapshot.items if snapshot is not None else ()
    reported = current.queue_position
    if reported is not None and reported > 0:
        index = reported - 1
        if index < len(items) and _same_title_artist(items[index], current.title, current.artist):
            return SourceVerdict.queue(reported)

    found = find_in_queue(snapshot, current.title, current.artist)
    if found is not None:
        mismatch = reported is not None and reported > 0
        return SourceVerdict.queue(found.position, position_mismatch=mismatch)

    return SourceVerdict.external(current.title, current.artist)


def to_device_position(display_index: int) -> int:
    """Convert a 0-based list index as shown to users into a 1-based device position."""

    return display_index + 1


def to_display_index(device_position: int) -> int:
    return device_position - 1


def is_valid_queue_position(position: object, queue_length: int) -> bool:
    return (
        isinstance(position, int)
        and not isinstance(position, bool)
        and 1 <= position <= queue_length
    )


__all__ = [
    "find_duplicate",
    "find_in_queue",
    "is_valid_queue_position",
    "resolve_source",
    "to_device_position",
    "to_display_index",
]
