"""Value objects shared by the resolution and queueing pipeline.

Everything here is request scoped and immutable. Queue snapshots and current
track reads are borrowed views of device state and go stale as soon as they
are returned.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import InvalidInputError


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str) and value.strip():
        try:
            return int(float(value.strip()))
        except ValueError:
            return None
    return None


def _coerce_strings(values: Iterable[Any] | None) -> tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        values = (values,)
    result: list[str] = []
    for value in values:
        text = _coerce_str(value)
        if text:
            result.append(text)
    return tuple(result)


@dataclass(slots=True, frozen=True)
class Track:
    """A playable catalog record.

    Identity for comparison purposes is the DedupKey derived from ``name`` and
    ``artist``; the catalog hands out several URIs for what listeners consider
    the same song.
    """

    name: str
    artist: str = ""
    uri: str = ""
    popularity: int | None = None
    duration_sec: int | None = None
    transports: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        name = _coerce_str(self.name)
        if not name:
            raise InvalidInputError("Track name must not be empty.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "artist", _coerce_str(self.artist))
        object.__setattr__(self, "uri", _coerce_str(self.uri))
        object.__setattr__(self, "popularity", _coerce_optional_int(self.popularity))
        object.__setattr__(self, "duration_sec", _coerce_optional_int(self.duration_sec))
        object.__setattr__(self, "transports", _coerce_strings(self.transports))

    @property
    def popularity_or_zero(self) -> int:
        return self.popularity or 0


@dataclass(slots=True, frozen=True)
class Album:
    name: str
    artist: str = ""
    uri: str = ""
    popularity: int | None = None
    total_tracks: int | None = None
    cover_url: str | None = None

    def __post_init__(self) -> None:
        name = _coerce_str(self.name)
        if not name:
            raise InvalidInputError("Album name must not be empty.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "artist", _coerce_str(self.artist))
        object.__setattr__(self, "uri", _coerce_str(self.uri))
        object.__setattr__(self, "popularity", _coerce_optional_int(self.popularity))
        object.__setattr__(self, "total_tracks", _coerce_optional_int(self.total_tracks))
        object.__setattr__(self, "cover_url", _coerce_str(self.cover_url) or None)


@dataclass(slots=True, frozen=True)
class Playlist:
    name: str
    owner: str = ""
    uri: str = ""
    followers: int | None = None
    total_tracks: int | None = None

    def __post_init__(self) -> None:
        name = _coerce_str(self.name)
        if not name:
            raise InvalidInputError("Playlist name must not be empty.")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "owner", _coerce_str(self.owner))
        object.__setattr__(self, "uri", _coerce_str(self.uri))
        object.__setattr__(self, "followers", _coerce_optional_int(self.followers))
        object.__setattr__(self, "total_tracks", _coerce_optional_int(self.total_tracks))


@dataclass(slots=True, frozen=True)
class QueueItem:
    title: str
    artist: str = ""
    uri: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "title", _coerce_str(self.title))
        object.__setattr__(self, "artist", _coerce_str(self.artist))
        object.__setattr__(self, "uri", _coerce_str(self.uri))


@dataclass(slots=True, frozen=True)
class QueueSnapshot:
    """Point-in-time read of the device queue."""

    items: tuple[QueueItem, ...] = ()
    total: int | None = None

    def __post_init__(self) -> None:
        items = tuple(self.items)
        object.__setattr__(self, "items", items)
        total = _coerce_optional_int(self.total)
        object.__setattr__(self, "total", len(items) if total is None else total)

    def __len__(self) -> int:
        return len(self.items)


@dataclass(slots=True, frozen=True)
class CurrentTrack:
    """What the device claims is playing; ``queue_position`` is 1-based."""

    title: str
    artist: str = ""
    uri: str = ""
    queue_position: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "title", _coerce_str(self.title))
        object.__setattr__(self, "artist", _coerce_str(self.artist))
        object.__setattr__(self, "uri", _coerce_str(self.uri))
        object.__setattr__(self, "queue_position", _coerce_optional_int(self.queue_position))


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    PAUSED = "paused"
    PLAYING = "playing"
    TRANSITIONING = "transitioning"

    @classmethod
    def parse(cls, value: Any) -> PlaybackState | None:
        """Map a device state string onto a known state, ``None`` if unknown."""

        if isinstance(value, cls):
            return value
        text = _coerce_str(value).lower()
        if text == "paused_playback":
            text = "paused"
        for state in cls:
            if state.value == text:
                return state
        return None

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.TRANSITIONING}


@dataclass(slots=True, frozen=True)
class BoostResult:
    query: str
    applied_boosters: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class RankedCandidate:
    """A catalog item annotated with its relevance score."""

    item: Any
    score: int
    tie_break: int = 0


@dataclass(slots=True, frozen=True)
class ThemeSplit:
    main_count: int
    theme_count: int

    @property
    def total(self) -> int:
        return self.main_count + self.theme_count


@dataclass(slots=True, frozen=True)
class QueueMatch:
    """Location of a queue item; ``index`` is 0-based, ``position`` 1-based."""

    index: int
    matched_by: str

    @property
    def position(self) -> int:
        return self.index + 1


class SourceType(str, Enum):
    QUEUE = "queue"
    EXTERNAL = "external"


@dataclass(slots=True, frozen=True)
class SourceVerdict:
    type: SourceType
    position: int | None = None
    track: QueueItem | None = None
    position_mismatch: bool = False

    @classmethod
    def queue(cls, position: int, *, position_mismatch: bool = False) -> SourceVerdict:
        return cls(type=SourceType.QUEUE, position=position, position_mismatch=position_mismatch)

    @classmethod
    def external(cls, title: str, artist: str) -> SourceVerdict:
        return cls(type=SourceType.EXTERNAL, track=QueueItem(title=title, artist=artist))

    @property
    def from_queue(self) -> bool:
        return self.type is SourceType.QUEUE


class FailureKind(str, Enum):
    REGION_RESTRICTION = "region_restriction"
    QUEUE_FAILURE = "queue_failure"


@dataclass(slots=True, frozen=True)
class QueueFailure:
    track: Track
    kind: FailureKind
    error_code: str | None = None
    message: str = ""


class QueueOutcome(str, Enum):
    QUEUED = "queued"
    NOTHING_FOUND = "nothing_found"
    ALL_BLACKLISTED = "all_blacklisted"
    BLACKLISTED = "blacklisted"
    DUPLICATE = "duplicate"
    REGION_RESTRICTED = "region_restricted"
    QUEUE_FAILED = "queue_failed"


@dataclass(slots=True, frozen=True)
class CommitResult:
    added: int
    failures: tuple[QueueFailure, ...] = ()
    state: PlaybackState | None = None
    flushed: bool = False
    playback_started: bool = False

    @property
    def failed_tracks(self) -> tuple[Track, ...]:
        return tuple(failure.track for failure in self.failures)

    @property
    def region_restricted(self) -> tuple[QueueFailure, ...]:
        return tuple(
            failure for failure in self.failures if failure.kind is FailureKind.REGION_RESTRICTION
        )


__all__ = [
    "Album",
    "BoostResult",
    "CommitResult",
    "CurrentTrack",
    "FailureKind",
    "PlaybackState",
    "Playlist",
    "QueueFailure",
    "QueueItem",
    "QueueMatch",
    "QueueOutcome",
    "QueueSnapshot",
    "RankedCandidate",
    "SourceType",
    "SourceVerdict",
    "ThemeSplit",
    "Track",
]
