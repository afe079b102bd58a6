import pytest

from tunequeue.core.errors import InvalidInputError
from tunequeue.core.theme_mixer import mix_tracks, split_theme
from tunequeue.core.types import Track


def _tracks(prefix: str, count: int) -> list[Track]:
    return [Track(name=f"{prefix}{index}") for index in range(1, count + 1)]


def _names(tracks: list[Track]) -> list[str]:
    return [track.name for track in tracks]


def test_theme_tracks_are_spread_through_the_batch() -> None:
    mixed = mix_tracks(_tracks("m", 6), _tracks("t", 2), 8)

    assert _names(mixed) == ["m1", "m2", "t1", "m3", "m4", "t2", "m5", "m6"]


def test_no_theme_tracks_returns_truncated_main() -> None:
    main = _tracks("m", 5)

    assert mix_tracks(main, [], 3) == main[:3]
    assert mix_tracks(main, [], 10) == main


def test_leftover_theme_tracks_follow_exhausted_main() -> None:
    mixed = mix_tracks(_tracks("m", 1), _tracks("t", 3), 4)

    assert _names(mixed) == ["m1", "t1", "t2", "t3"]


def test_mix_stops_at_requested_total() -> None:
    mixed = mix_tracks(_tracks("m", 6), _tracks("t", 2), 4)

    assert _names(mixed) == ["m1", "m2", "t1", "m3"]


def test_mix_rejects_negative_total() -> None:
    with pytest.raises(InvalidInputError):
        mix_tracks([], [], -1)


@pytest.mark.parametrize(
    ("total", "percentage", "expected"),
    [
        (10, 20, (8, 2)),
        (5, 50, (2, 3)),
        (10, 0, (10, 0)),
        (3, 100, (0, 3)),
        (0, 50, (0, 0)),
        (7, 10, (6, 1)),
    ],
)
def test_split_theme(total: int, percentage: int, expected: tuple[int, int]) -> None:
    split = split_theme(total, percentage, theme="christmas")

    assert (split.main_count, split.theme_count) == expected


def test_blank_theme_disables_theme_share() -> None:
    split = split_theme(10, 30, theme="   ")

    assert split.theme_count == 0
    assert split.main_count == 10


def test_split_always_adds_up_to_total() -> None:
    for total in range(0, 40):
        for percentage in [*range(0, 101, 7), 100]:
            split = split_theme(total, percentage)
            assert split.main_count + split.theme_count == total
            assert split.total == total


@pytest.mark.parametrize(("total", "percentage"), [(-1, 10), (5, -1), (5, 101)])
def test_split_rejects_invalid_input(total: int, percentage: int) -> None:
    with pytest.raises(InvalidInputError):
        split_theme(total, percentage)
