"""Utilities for working with Spotify URLs and URIs."""

from __future__ import annotations

from typing import Final
from urllib.parse import urlparse

_ALLOWED_HOST: Final[str] = "open.spotify.com"
_KINDS: Final[frozenset[str]] = frozenset({"track", "album", "playlist"})


def parse_spotify_id(url_or_uri: str | None, kind: str) -> str | None:
    """Extract a catalog identifier of ``kind`` from a Spotify URI or share URL.

    Accepts ``spotify:{kind}:{id}`` and ``https://open.spotify.com/{kind}/{id}``
    (optionally with an ``intl-xx`` path prefix). Query parameters and fragments
    are ignored. Returns ``None`` for anything else, including identifiers with
    non alphanumeric characters.
    """

    if kind not in _KINDS:
        raise ValueError(f"Unsupported Spotify resource kind: {kind!r}")
    if not url_or_uri:
        return None
    candidate = url_or_uri.strip()
    if not candidate:
        return None

    prefix = f"spotify:{kind}:"
    if candidate.lower().startswith(prefix):
        identifier = candidate[len(prefix) :]
        return identifier if identifier.isalnum() else None

    parsed = urlparse(candidate)
    if parsed.scheme not in {"http", "https"}:
        return None
    host = parsed.hostname
    if host is None or host.lower() != _ALLOWED_HOST:
        return None

    segments = [segment for segment in parsed.path.split("/") if segment]
    if segments and segments[0].lower().startswith("intl-"):
        segments = segments[1:]
    # legacy playlist links: /user/{owner}/playlist/{id}
    if kind == "playlist" and len(segments) >= 4 and segments[0].lower() == "user":
        segments = segments[2:]
    if len(segments) >= 2 and segments[0].lower() == kind:
        identifier = segments[1]
        return identifier if identifier.isalnum() else None
    return None


def is_catalog_reference(value: str | None, kind: str) -> bool:
    return parse_spotify_id(value, kind) is not None


def is_valid_track_uri(uri: str | None) -> bool:
    """True for canonical ``spotify:track:{id}`` URIs the device can queue."""

    if not uri or not uri.startswith("spotify:track:"):
        return False
    return parse_spotify_id(uri, "track") is not None


__all__ = ["is_catalog_reference", "is_valid_track_uri", "parse_spotify_id"]
