"""Contracts for the external capabilities the pipeline consumes.

The catalog, the playback device and the ban list are owned elsewhere; the
pipeline only talks to them through the protocols below.
"""

from __future__ import annotations

import re
from typing import Protocol

from tunequeue.core.types import (
    Album,
    CurrentTrack,
    PlaybackState,
    Playlist,
    QueueSnapshot,
    Track,
)


class CatalogError(RuntimeError):
    """Base exception raised when a catalog request fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.cause = cause


class CatalogTimeoutError(CatalogError):
    """Raised when the catalog did not respond within the configured timeout."""

    def __init__(self, provider: str, timeout_ms: int, *, cause: Exception | None = None) -> None:
        super().__init__(provider, f"{provider} timed out after {timeout_ms}ms", cause=cause)
        self.timeout_ms = timeout_ms


class CatalogRateLimitedError(CatalogError):
    """Raised when the catalog applied rate limits to the request."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        retry_after_ms: int | None = None,
        cause: Exception | None = None,
        status_code: int | None = 429,
    ) -> None:
        super().__init__(provider, message, status_code=status_code, cause=cause)
        self.retry_after_ms = retry_after_ms


class CatalogNotFoundError(CatalogError):
    """Raised when the catalog reported that the requested resource does not exist."""


class CatalogDependencyError(CatalogError):
    """Raised when the catalog or its transport failed while serving the request."""


class DeviceCommandError(RuntimeError):
    """Raised by a playback device that rejected a command.

    ``error_code`` carries the device's own code when it reports one, for
    example the code a speaker returns for a region restricted URI.
    """

    def __init__(self, message: str, *, error_code: str | int | None = None) -> None:
        super().__init__(message)
        self.error_code = None if error_code is None else str(error_code)


_UPNP_ERROR_CODE = re.compile(r"errorCode>\s*(\d+)\s*<")


def device_error_code(exc: BaseException) -> str | None:
    """Return the device error code carried by ``exc``, if any."""

    code = getattr(exc, "error_code", None)
    if code is not None and str(code).strip():
        return str(code).strip()
    match = _UPNP_ERROR_CODE.search(str(exc))
    if match:
        return match.group(1)
    return None


class CatalogSearch(Protocol):
    """Search and lookup capability of the music catalog."""

    name: str

    async def search_tracks(self, query: str, limit: int) -> list[Track]:
        """Return up to ``limit`` tracks for ``query``."""

    async def search_albums(self, query: str, limit: int) -> list[Album]:
        """Return up to ``limit`` albums for ``query``."""

    async def search_playlists(self, query: str, limit: int) -> list[Playlist]:
        """Return up to ``limit`` playlists for ``query``."""

    async def get_album(self, uri: str) -> Album:
        """Return album metadata for a catalog URI or URL."""

    async def get_playlist(self, uri: str) -> Playlist:
        """Return playlist metadata for a catalog URI or URL."""

    async def get_album_tracks(self, uri: str) -> list[Track]:
        """Return every track of the album."""

    async def get_playlist_tracks(self, uri: str) -> list[Track]:
        """Return every playable track of the playlist."""


class PlaybackDevice(Protocol):
    """Control surface of the networked player that owns the queue."""

    async def get_queue(self) -> QueueSnapshot:
        """Return a snapshot of the current queue."""

    async def queue(self, uri: str, position: int | None = None) -> None:
        """Append ``uri`` (or insert at 1-based ``position``)."""

    async def get_current_state(self) -> PlaybackState | str:
        """Return the transport state."""

    async def get_current_track(self) -> CurrentTrack | None:
        """Return what the device reports as playing."""

    async def play(self) -> None:
        """Start or resume playback."""

    async def flush(self) -> None:
        """Remove everything from the queue."""


class BlacklistSource(Protocol):
    """Read-only view of the persisted track ban list."""

    def load(self) -> list[str]:
        """Return the current entries."""


__all__ = [
    "BlacklistSource",
    "CatalogDependencyError",
    "CatalogError",
    "CatalogNotFoundError",
    "CatalogRateLimitedError",
    "CatalogSearch",
    "CatalogTimeoutError",
    "DeviceCommandError",
    "PlaybackDevice",
    "device_error_code",
]
