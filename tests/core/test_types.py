import pytest

from tunequeue.core.errors import InvalidInputError
from tunequeue.core.types import (
    CommitResult,
    FailureKind,
    PlaybackState,
    Playlist,
    QueueFailure,
    QueueItem,
    QueueSnapshot,
    SourceType,
    SourceVerdict,
    Track,
)


def test_track_requires_a_name() -> None:
    with pytest.raises(InvalidInputError):
        Track(name="   ")


def test_track_coerces_payload_values() -> None:
    track = Track(
        name="  Song ",
        artist=None,
        popularity="42",
        duration_sec=215.7,
        transports=["upnp", ""],
    )

    assert track.name == "Song"
    assert track.artist == ""
    assert track.popularity == 42
    assert track.duration_sec == 215
    assert track.transports == ("upnp",)
    assert Track(name="x", popularity=True).popularity is None
    assert Track(name="x").popularity_or_zero == 0


def test_playlist_followers_coercion() -> None:
    assert Playlist(name="Mix", followers="1200").followers == 1200
    assert Playlist(name="Mix", followers="many").followers is None


def test_queue_snapshot_total_defaults_to_length() -> None:
    snapshot = QueueSnapshot(items=[QueueItem(title="a"), QueueItem(title="b")])

    assert isinstance(snapshot.items, tuple)
    assert len(snapshot) == 2
    assert snapshot.total == 2
    assert QueueSnapshot(items=(), total=40).total == 40


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("PLAYING", PlaybackState.PLAYING),
        ("paused_playback", PlaybackState.PAUSED),
        (" stopped ", PlaybackState.STOPPED),
        ("TRANSITIONING", PlaybackState.TRANSITIONING),
        (PlaybackState.PAUSED, PlaybackState.PAUSED),
        ("NO_MEDIA_PRESENT", None),
        (None, None),
    ],
)
def test_playback_state_parse(raw: object, expected: PlaybackState | None) -> None:
    assert PlaybackState.parse(raw) is expected


def test_source_verdict_factories() -> None:
    queued = SourceVerdict.queue(3, position_mismatch=True)
    external = SourceVerdict.external("Jingle", "Radio")

    assert queued.type is SourceType.QUEUE and queued.position == 3
    assert queued.from_queue and queued.position_mismatch
    assert external.type is SourceType.EXTERNAL
    assert external.track == QueueItem(title="Jingle", artist="Radio")


def test_commit_result_region_view() -> None:
    blocked = QueueFailure(
        track=Track(name="a"), kind=FailureKind.REGION_RESTRICTION, error_code="800"
    )
    broken = QueueFailure(track=Track(name="b"), kind=FailureKind.QUEUE_FAILURE)

    result = CommitResult(added=1, failures=(blocked, broken))

    assert result.region_restricted == (blocked,)
    assert result.failed_tracks == (Track(name="a"), Track(name="b"))


def test_only_playing_and_transitioning_states_are_active() -> None:
    active = {state for state in PlaybackState if state.is_active}

    assert active == {PlaybackState.PLAYING, PlaybackState.TRANSITIONING}
