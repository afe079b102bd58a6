"""Ban-list checks applied to candidates before anything reaches the device."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .types import Track


def _normalise_entries(blacklist: Iterable[str] | None) -> tuple[str, ...]:
    if not blacklist:
        return ()
    entries: list[str] = []
    for entry in blacklist:
        text = str(entry or "").strip().lower()
        if text:
            entries.append(text)
    return tuple(entries)


def is_banned(track_name: str, artist_name: str, blacklist: Iterable[str] | None) -> bool:
    """True when an entry is a substring of ``"{track} {artist}"`` or of the track name."""

    entries = _normalise_entries(blacklist)
    if not entries:
        return False
    name = (track_name or "").lower()
    full = f"{name} {(artist_name or '').lower()}"
    return any(entry in full or entry in name for entry in entries)


@dataclass(slots=True, frozen=True)
class BlacklistPartition:
    allowed: tuple[Track, ...]
    banned: tuple[Track, ...]

    @property
    def all_banned(self) -> bool:
        """A non-empty batch in which every track matched the ban list."""

        return bool(self.banned) and not self.allowed


def partition_tracks(
    tracks: Sequence[Track], blacklist: Iterable[str] | None
) -> BlacklistPartition:
    entries = _normalise_entries(blacklist)
    allowed: list[Track] = []
    banned: list[Track] = []
    for track in tracks:
        if is_banned(track.name, track.artist, entries):
            banned.append(track)
        else:
            allowed.append(track)
    return BlacklistPartition(allowed=tuple(allowed), banned=tuple(banned))


__all__ = ["BlacklistPartition", "is_banned", "partition_tracks"]
