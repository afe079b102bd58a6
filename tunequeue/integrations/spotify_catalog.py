"""Spotify backed implementation of the catalog search capability."""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

import spotipy
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials

from tunequeue.config import SpotifyConfig
from tunequeue.core.errors import InvalidInputError
from tunequeue.core.types import Album, Playlist, Track
from tunequeue.integrations.contracts import (
    CatalogDependencyError,
    CatalogError,
    CatalogNotFoundError,
    CatalogRateLimitedError,
)
from tunequeue.logging import get_logger
from tunequeue.utils.spotify_url import parse_spotify_id

logger = get_logger(__name__)

T = TypeVar("T")

ALBUM_PAGE_SIZE = 50
PLAYLIST_PAGE_SIZE = 100


def _first_artist_name(payload: Any) -> str:
    if not isinstance(payload, list):
        return ""
    for entry in payload:
        if isinstance(entry, Mapping) and entry.get("name"):
            return str(entry["name"])
    return ""


def _items(payload: Any, container: str | None = None) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        return []
    if container is not None:
        payload = payload.get(container)
        if not isinstance(payload, Mapping):
            return []
    items = payload.get("items")
    if not isinstance(items, list):
        return []
    return [entry for entry in items if isinstance(entry, Mapping)]


def track_from_payload(payload: Mapping[str, Any]) -> Track:
    duration_ms = payload.get("duration_ms")
    return Track(
        name=payload.get("name"),
        artist=_first_artist_name(payload.get("artists")),
        uri=payload.get("uri"),
        popularity=payload.get("popularity"),
        duration_sec=int(duration_ms) // 1000 if isinstance(duration_ms, int | float) else None,
    )


def album_from_payload(payload: Mapping[str, Any]) -> Album:
    cover_url = None
    images = payload.get("images")
    if isinstance(images, list):
        for image in images:
            if isinstance(image, Mapping) and image.get("url"):
                cover_url = str(image["url"])
                break
    return Album(
        name=payload.get("name"),
        artist=_first_artist_name(payload.get("artists")),
        uri=payload.get("uri"),
        popularity=payload.get("popularity"),
        total_tracks=payload.get("total_tracks"),
        cover_url=cover_url,
    )


def playlist_from_payload(payload: Mapping[str, Any]) -> Playlist:
    owner = payload.get("owner")
    owner_name = ""
    if isinstance(owner, Mapping):
        owner_name = str(owner.get("display_name") or owner.get("id") or "")
    followers = payload.get("followers")
    tracks = payload.get("tracks")
    return Playlist(
        name=payload.get("name"),
        owner=owner_name,
        uri=payload.get("uri"),
        followers=followers.get("total") if isinstance(followers, Mapping) else None,
        total_tracks=tracks.get("total") if isinstance(tracks, Mapping) else None,
    )


def _parse_all(
    entries: Iterable[Mapping[str, Any]], parse: Callable[[Mapping[str, Any]], T]
) -> list[T]:
    results: list[T] = []
    for entry in entries:
        try:
            results.append(parse(entry))
        except InvalidInputError as exc:
            logger.debug("Skipping malformed Spotify payload: %s", exc)
    return results


class SpotifyCatalog:
    """Catalog adapter running spotipy calls off the event loop."""

    name = "spotify"

    def __init__(
        self,
        config: SpotifyConfig,
        *,
        client: Any | None = None,
        result_cap: int = 50,
        rate_limit_seconds: float = 0.1,
    ) -> None:
        self._market = config.market
        self._result_cap = max(1, result_cap)
        self._rate_limit_seconds = rate_limit_seconds
        self._lock = threading.Lock()
        self._last_request_time = 0.0

        if client is not None:
            self._client = client
        else:
            if not (config.client_id and config.client_secret):
                raise ValueError("Spotify configuration is incomplete")
            auth_manager = SpotifyClientCredentials(
                client_id=config.client_id,
                client_secret=config.client_secret,
            )
            self._client = spotipy.Spotify(auth_manager=auth_manager)

    def _respect_rate_limit(self) -> None:
        with self._lock:
            now = time.monotonic()
            elapsed = now - self._last_request_time
            if elapsed < self._rate_limit_seconds:
                time.sleep(self._rate_limit_seconds - elapsed)
            self._last_request_time = time.monotonic()

    def _translate_error(self, exc: Exception, operation: str) -> CatalogError:
        if isinstance(exc, SpotifyException):
            status = getattr(exc, "http_status", None)
            if status == 429:
                retry_after_ms = None
                headers = getattr(exc, "headers", None) or {}
                retry_after = headers.get("Retry-After") if isinstance(headers, Mapping) else None
                if retry_after is not None:
                    try:
                        retry_after_ms = int(float(retry_after) * 1000)
                    except (TypeError, ValueError):
                        retry_after_ms = None
                return CatalogRateLimitedError(
                    self.name,
                    f"spotify {operation} rate limited",
                    retry_after_ms=retry_after_ms,
                    cause=exc,
                )
            if status == 404:
                return CatalogNotFoundError(
                    self.name, f"spotify {operation} not found", status_code=404, cause=exc
                )
            return CatalogDependencyError(
                self.name, f"spotify {operation} failed", status_code=status, cause=exc
            )
        return CatalogDependencyError(self.name, f"spotify {operation} failed", cause=exc)

    async def _call(self, operation: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        def _run() -> Any:
            self._respect_rate_limit()
            return func(*args, **kwargs)

        try:
            return await asyncio.to_thread(_run)
        except CatalogError:
            raise
        except Exception as exc:
            logger.warning("Spotify %s failed: %s", operation, exc)
            raise self._translate_error(exc, operation) from exc

    def _limit(self, limit: int) -> int:
        return max(1, min(int(limit), self._result_cap))

    def _require_id(self, value: str, kind: str) -> str:
        identifier = parse_spotify_id(value, kind)
        if identifier is None:
            raise InvalidInputError(f"Not a Spotify {kind} reference: {value!r}")
        return identifier

    async def search_tracks(self, query: str, limit: int) -> list[Track]:
        payload = await self._call(
            "track search",
            self._client.search,
            q=query,
            type="track",
            limit=self._limit(limit),
            market=self._market,
        )
        return _parse_all(_items(payload, "tracks"), track_from_payload)

    async def search_albums(self, query: str, limit: int) -> list[Album]:
        payload = await self._call(
            "album search",
            self._client.search,
            q=query,
            type="album",
            limit=self._limit(limit),
            market=self._market,
        )
        return _parse_all(_items(payload, "albums"), album_from_payload)

    async def search_playlists(self, query: str, limit: int) -> list[Playlist]:
        payload = await self._call(
            "playlist search",
            self._client.search,
            q=query,
            type="playlist",
            limit=self._limit(limit),
            market=self._market,
        )
        return _parse_all(_items(payload, "playlists"), playlist_from_payload)

    async def get_album(self, uri: str) -> Album:
        album_id = self._require_id(uri, "album")
        payload = await self._call("album lookup", self._client.album, album_id, market=self._market)
        if not isinstance(payload, Mapping):
            raise CatalogNotFoundError(self.name, "album not found", status_code=404)
        return album_from_payload(payload)

    async def get_playlist(self, uri: str) -> Playlist:
        playlist_id = self._require_id(uri, "playlist")
        payload = await self._call(
            "playlist lookup", self._client.playlist, playlist_id, market=self._market
        )
        if not isinstance(payload, Mapping):
            raise CatalogNotFoundError(self.name, "playlist not found", status_code=404)
        return playlist_from_payload(payload)

    async def get_album_tracks(self, uri: str) -> list[Track]:
        album_id = self._require_id(uri, "album")
        tracks: list[Track] = []
        offset = 0
        while True:
            payload = await self._call(
                "album tracks",
                self._client.album_tracks,
                album_id,
                limit=ALBUM_PAGE_SIZE,
                offset=offset,
                market=self._market,
            )
            items = _items(payload)
            tracks.extend(_parse_all(items, track_from_payload))
            if len(items) < ALBUM_PAGE_SIZE or not payload.get("next"):
                break
            offset += ALBUM_PAGE_SIZE
        return tracks

    async def get_playlist_tracks(self, uri: str) -> list[Track]:
        playlist_id = self._require_id(uri, "playlist")
        tracks: list[Track] = []
        offset = 0
        while True:
            payload = await self._call(
                "playlist tracks",
                self._client.playlist_items,
                playlist_id,
                limit=PLAYLIST_PAGE_SIZE,
                offset=offset,
                market=self._market,
                additional_types=("track",),
            )
            items = _items(payload)
            # removed tracks come back as entries with "track": null
            entries = [item["track"] for item in items if isinstance(item.get("track"), Mapping)]
            tracks.extend(_parse_all(entries, track_from_payload))
            if len(items) < PLAYLIST_PAGE_SIZE or not payload.get("next"):
                break
            offset += PLAYLIST_PAGE_SIZE
        return tracks


__all__ = [
    "SpotifyCatalog",
    "album_from_payload",
    "playlist_from_payload",
    "track_from_payload",
]
