"""Collapse catalog editions of one song into a single candidate."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from tunequeue.utils.text_normalization import dedup_key

from .types import Track


def track_key(track: Track) -> str:
    return dedup_key(track.name, track.artist)


def dedupe_tracks(
    tracks: Sequence[Track] | None,
    already_seen: Iterable[str] = (),
) -> list[Track]:
    """Return ``tracks`` by descending popularity with one entry per DedupKey.

    Keys in ``already_seen`` are treated as claimed by another result set and
    never appear in the output. The caller's collection is not mutated.
    """

    seen = set(already_seen)
    ordered = sorted(tracks or (), key=lambda track: track.popularity_or_zero, reverse=True)
    result: list[Track] = []
    for track in ordered:
        key = track_key(track)
        if key in seen:
            continue
        seen.add(key)
        result.append(track)
    return result


def keys_of(tracks: Iterable[Track]) -> set[str]:
    return {track_key(track) for track in tracks}


__all__ = ["dedupe_tracks", "keys_of", "track_key"]
