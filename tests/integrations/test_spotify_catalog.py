from __future__ import annotations

from typing import Any

import pytest
from spotipy.exceptions import SpotifyException

from tunequeue.config import SpotifyConfig
from tunequeue.core.errors import InvalidInputError
from tunequeue.integrations.contracts import (
    CatalogDependencyError,
    CatalogNotFoundError,
    CatalogRateLimitedError,
)
from tunequeue.integrations.spotify_catalog import (
    SpotifyCatalog,
    album_from_payload,
    playlist_from_payload,
    track_from_payload,
)


def _track_payload(index: int, *, name: str | None = None) -> dict[str, Any]:
    return {
        "name": name if name is not None else f"Song {index}",
        "artists": [{"name": "Artist"}, {"name": "Guest"}],
        "uri": f"spotify:track:id{index}",
        "popularity": index,
        "duration_ms": 180_500,
    }


class _FakeSpotify:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.error: Exception | None = None
        self.search_payload: dict[str, Any] = {}
        self.album_tracks_total = 0
        self.playlist_pages: list[dict[str, Any]] = []

    def _record(self, name: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((name, args, kwargs))
        if self.error is not None:
            raise self.error

    def search(self, **kwargs: Any) -> dict[str, Any]:
        self._record("search", **kwargs)
        return self.search_payload

    def album(self, album_id: str, **kwargs: Any) -> dict[str, Any]:
        self._record("album", album_id, **kwargs)
        return {
            "name": "Abbey Road",
            "artists": [{"name": "The Beatles"}],
            "uri": f"spotify:album:{album_id}",
            "popularity": 80,
            "total_tracks": 17,
            "images": [{"url": "https://img/1"}],
        }

    def playlist(self, playlist_id: str, **kwargs: Any) -> dict[str, Any]:
        self._record("playlist", playlist_id, **kwargs)
        return {
            "name": "Christmas Hits",
            "owner": {"display_name": "Spotify", "id": "spotify"},
            "uri": f"spotify:playlist:{playlist_id}",
            "followers": {"total": 1000},
            "tracks": {"total": 3},
        }

    def album_tracks(
        self, album_id: str, *, limit: int, offset: int, **kwargs: Any
    ) -> dict[str, Any]:
        self._record("album_tracks", album_id, limit=limit, offset=offset, **kwargs)
        end = min(offset + limit, self.album_tracks_total)
        items = [_track_payload(index) for index in range(offset, end)]
        return {"items": items, "next": "more" if end < self.album_tracks_total else None}

    def playlist_items(
        self, playlist_id: str, *, limit: int, offset: int, **kwargs: Any
    ) -> dict[str, Any]:
        self._record("playlist_items", playlist_id, limit=limit, offset=offset, **kwargs)
        return self.playlist_pages.pop(0)


def _catalog(client: _FakeSpotify) -> SpotifyCatalog:
    config = SpotifyConfig(client_id=None, client_secret=None, market="SE")
    return SpotifyCatalog(config, client=client, result_cap=50, rate_limit_seconds=0)


def test_track_payload_parsing() -> None:
    track = track_from_payload(_track_payload(7))

    assert track.name == "Song 7"
    assert track.artist == "Artist"
    assert track.uri == "spotify:track:id7"
    assert track.popularity == 7
    assert track.duration_sec == 180


def test_album_and_playlist_payload_parsing() -> None:
    album = album_from_payload({"name": "A", "artists": [], "images": [{"url": "u"}]})
    playlist = playlist_from_payload({"name": "P", "owner": {"id": "me"}, "followers": None})

    assert album.artist == "" and album.cover_url == "u"
    assert playlist.owner == "me" and playlist.followers is None


def test_missing_credentials_are_rejected() -> None:
    with pytest.raises(ValueError):
        SpotifyCatalog(SpotifyConfig(client_id=None, client_secret=None, market="US"))


@pytest.mark.asyncio
async def test_search_tracks_passes_market_and_caps_limit() -> None:
    client = _FakeSpotify()
    client.search_payload = {
        "tracks": {"items": [_track_payload(1), _track_payload(2, name=""), None]}
    }
    catalog = _catalog(client)

    tracks = await catalog.search_tracks("abba", 500)

    assert [track.name for track in tracks] == ["Song 1"]
    _, _, kwargs = client.calls[0]
    assert kwargs == {"q": "abba", "type": "track", "limit": 50, "market": "SE"}


@pytest.mark.asyncio
async def test_search_playlists_and_albums() -> None:
    client = _FakeSpotify()
    client.search_payload = {
        "albums": {
            "items": [{"name": "Gold", "artists": [{"name": "ABBA"}], "uri": "spotify:album:g"}]
        },
        "playlists": {
            "items": [{"name": "Mix", "owner": {"display_name": "DJ"}, "uri": "spotify:playlist:m"}]
        },
    }
    catalog = _catalog(client)

    albums = await catalog.search_albums("gold", 3)
    playlists = await catalog.search_playlists("mix", 5)

    assert [album.artist for album in albums] == ["ABBA"]
    assert [playlist.owner for playlist in playlists] == ["DJ"]


@pytest.mark.asyncio
async def test_album_tracks_are_paged() -> None:
    client = _FakeSpotify()
    client.album_tracks_total = 60
    catalog = _catalog(client)

    tracks = await catalog.get_album_tracks("https://open.spotify.com/album/abc123")

    assert len(tracks) == 60
    offsets = [kwargs["offset"] for name, _, kwargs in client.calls if name == "album_tracks"]
    assert offsets == [0, 50]
    assert client.calls[0][1] == ("abc123",)


@pytest.mark.asyncio
async def test_playlist_tracks_skip_removed_entries() -> None:
    client = _FakeSpotify()
    client.playlist_pages = [
        {
            "items": [
                {"track": _track_payload(1)},
                {"track": None},
                {"track": _track_payload(2)},
            ],
            "next": None,
        }
    ]
    catalog = _catalog(client)

    tracks = await catalog.get_playlist_tracks("spotify:playlist:xyz")

    assert [track.uri for track in tracks] == ["spotify:track:id1", "spotify:track:id2"]


@pytest.mark.asyncio
async def test_album_and_playlist_lookup() -> None:
    client = _FakeSpotify()
    catalog = _catalog(client)

    album = await catalog.get_album("spotify:album:abc")
    playlist = await catalog.get_playlist("https://open.spotify.com/playlist/xyz")

    assert album.name == "Abbey Road" and album.total_tracks == 17
    assert playlist.owner == "Spotify" and playlist.followers == 1000


@pytest.mark.asyncio
async def test_lookup_rejects_non_catalog_reference() -> None:
    catalog = _catalog(_FakeSpotify())

    with pytest.raises(InvalidInputError):
        await catalog.get_album("abbey road")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (429, CatalogRateLimitedError),
        (404, CatalogNotFoundError),
        (502, CatalogDependencyError),
    ],
)
async def test_spotify_errors_are_translated(status: int, expected: type[Exception]) -> None:
    client = _FakeSpotify()
    client.error = SpotifyException(status, -1, "failure", headers={"Retry-After": "2"})
    catalog = _catalog(client)

    with pytest.raises(expected) as info:
        await catalog.search_tracks("abba", 10)

    assert info.value.provider == "spotify"
    if status == 429:
        assert info.value.retry_after_ms == 2000
    else:
        assert info.value.status_code == status


@pytest.mark.asyncio
async def test_transport_errors_become_dependency_errors() -> None:
    client = _FakeSpotify()
    client.error = ConnectionError("reset")
    catalog = _catalog(client)

    with pytest.raises(CatalogDependencyError) as info:
        await catalog.search_tracks("abba", 10)

    assert isinstance(info.value.cause, ConnectionError)
