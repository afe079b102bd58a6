"""Heuristic relevance ranking for catalog search results.

The catalog already does fuzzy matching server side, so the ranker only
re-orders an already relevant set: a result whose artist *and* title match the
query must beat lookalikes such as covers and tribute acts.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from tunequeue.utils.text_normalization import fold_text

from .types import Album, Playlist, RankedCandidate, Track

T = TypeVar("T")

BOTH_MATCH_SCORE = 10_000
TITLE_MATCH_SCORE = 5_000
ARTIST_MATCH_SCORE = 2_000
WORD_IN_NAME_SCORE = 1_000
WORD_IN_ARTIST_SCORE = 500

_TITLE_MIN_WORD = 3
_ARTIST_MIN_WORD = 4


@dataclass(slots=True, frozen=True)
class _TermParts:
    artist_words: tuple[str, ...]
    title_words: tuple[str, ...]

    @property
    def segmented(self) -> bool:
        return bool(self.artist_words) and bool(self.title_words)


def _words(text: str, min_length: int) -> tuple[str, ...]:
    return tuple(word for word in text.split() if len(word) >= min_length)


def _parse_term(term: str) -> _TermParts:
    lowered = fold_text(term)
    dash = lowered.find(" - ")
    if dash > 0:
        left, right = lowered[:dash], lowered[dash + 3 :]
        parts = _TermParts(
            artist_words=_words(left, _ARTIST_MIN_WORD),
            title_words=_words(right, _TITLE_MIN_WORD),
        )
    else:
        by = lowered.find(" by ")
        if by > 0:
            left, right = lowered[:by], lowered[by + 4 :]
            parts = _TermParts(
                artist_words=_words(right, _ARTIST_MIN_WORD),
                title_words=_words(left, _TITLE_MIN_WORD),
            )
        else:
            parts = _TermParts(artist_words=(), title_words=())
    if parts.segmented:
        return parts
    return _TermParts(artist_words=(), title_words=_words(lowered, _TITLE_MIN_WORD))


def _score(parts: _TermParts, name: str, artist: str) -> int:
    if parts.segmented:
        artist_match = all(word in artist for word in parts.artist_words)
        title_match = all(word in name for word in parts.title_words)
        score = 0
        if artist_match and title_match:
            score += BOTH_MATCH_SCORE
        if title_match:
            score += TITLE_MATCH_SCORE
        if artist_match:
            score += ARTIST_MATCH_SCORE
        return score

    score = WORD_IN_NAME_SCORE * sum(1 for word in parts.title_words if word in name)
    score += WORD_IN_ARTIST_SCORE * sum(
        1 for word in parts.title_words if len(word) > 3 and word in artist
    )
    return score


class RelevanceRanker(Generic[T]):
    """Score items against a search term; ties fall back to ``tie_break``."""

    def __init__(
        self,
        *,
        name_of: Callable[[T], str],
        artist_of: Callable[[T], str],
        tie_break_of: Callable[[T], int | None],
    ) -> None:
        self._name_of = name_of
        self._artist_of = artist_of
        self._tie_break_of = tie_break_of

    def score(self, items: Sequence[T] | None, search_term: str | None) -> list[RankedCandidate]:
        if not items:
            return []
        parts = _parse_term(search_term or "")
        scored = [
            RankedCandidate(
                item=item,
                score=_score(parts, fold_text(self._name_of(item)), fold_text(self._artist_of(item))),
                tie_break=self._tie_break_of(item) or 0,
            )
            for item in items
        ]
        scored.sort(key=lambda candidate: (-candidate.score, -candidate.tie_break))
        return scored

    def rank(self, items: Sequence[T] | None, search_term: str | None) -> list[T]:
        if not items:
            return []
        if not search_term or not search_term.strip():
            return list(items)
        return [candidate.item for candidate in self.score(items, search_term)]


TRACK_RANKER: RelevanceRanker[Track] = RelevanceRanker(
    name_of=lambda track: track.name,
    artist_of=lambda track: track.artist,
    tie_break_of=lambda track: track.popularity,
)
ALBUM_RANKER: RelevanceRanker[Album] = RelevanceRanker(
    name_of=lambda album: album.name,
    artist_of=lambda album: album.artist,
    tie_break_of=lambda album: album.popularity,
)
PLAYLIST_RANKER: RelevanceRanker[Playlist] = RelevanceRanker(
    name_of=lambda playlist: playlist.name,
    artist_of=lambda playlist: playlist.owner,
    tie_break_of=lambda playlist: playlist.followers,
)


def rank_tracks(tracks: Sequence[Track] | None, search_term: str | None) -> list[Track]:
    return TRACK_RANKER.rank(tracks, search_term)


def rank_albums(albums: Sequence[Album] | None, search_term: str | None) -> list[Album]:
    return ALBUM_RANKER.rank(albums, search_term)


def rank_playlists(
    playlists: Sequence[Playlist] | None, search_term: str | None
) -> list[Playlist]:
    return PLAYLIST_RANKER.rank(playlists, search_term)


__all__ = [
    "ALBUM_RANKER",
    "PLAYLIST_RANKER",
    "TRACK_RANKER",
    "RelevanceRanker",
    "rank_albums",
    "rank_playlists",
    "rank_tracks",
]
