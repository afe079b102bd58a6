"""tunequeue core domain exports."""

from .blacklist import BlacklistPartition, is_banned, partition_tracks
from .boosters import QueryBooster, apply_boosters, list_boosters
from .dedupe import dedupe_tracks, track_key
from .errors import InvalidInputError
from .queue_matching import find_duplicate, find_in_queue, resolve_source
from .ranking import rank_albums, rank_playlists, rank_tracks
from .theme_mixer import mix_tracks, split_theme
from .types import (
    Album,
    CurrentTrack,
    PlaybackState,
    Playlist,
    QueueItem,
    QueueSnapshot,
    SourceVerdict,
    Track,
)

__all__ = [
    "Album",
    "BlacklistPartition",
    "CurrentTrack",
    "InvalidInputError",
    "PlaybackState",
    "Playlist",
    "QueryBooster",
    "QueueItem",
    "QueueSnapshot",
    "SourceVerdict",
    "Track",
    "apply_boosters",
    "dedupe_tracks",
    "find_duplicate",
    "find_in_queue",
    "is_banned",
    "list_boosters",
    "mix_tracks",
    "partition_tracks",
    "rank_albums",
    "rank_playlists",
    "rank_tracks",
    "resolve_source",
    "split_theme",
    "track_key",
]
