from tunequeue.core.blacklist import is_banned, partition_tracks
from tunequeue.core.types import Track


def test_entry_matching_track_name() -> None:
    assert is_banned("Last Christmas", "Wham!", ["last christmas"]) is True


def test_entry_matching_artist_through_full_string() -> None:
    assert is_banned("Last Christmas (Live)", "Wham!", ["wham"]) is True


def test_matching_is_case_insensitive() -> None:
    assert is_banned("Last Christmas", "Wham!", ["  LAST Christmas "]) is True


def test_unrelated_entries_do_not_match() -> None:
    assert is_banned("Yesterday", "The Beatles", ["wham", "last christmas"]) is False
    assert is_banned("Yesterday", "The Beatles", []) is False
    assert is_banned("Yesterday", "The Beatles", ["", "   "]) is False


def test_partition_keeps_order_and_flags_all_banned() -> None:
    wham = Track(name="Last Christmas", artist="Wham!")
    mariah = Track(name="All I Want for Christmas Is You", artist="Mariah Carey")
    beatles = Track(name="Yesterday", artist="The Beatles")

    partition = partition_tracks([wham, beatles, mariah], ["wham", "mariah"])

    assert partition.allowed == (beatles,)
    assert partition.banned == (wham, mariah)
    assert partition.all_banned is False

    everything = partition_tracks([wham, mariah], ["christmas"])
    assert everything.all_banned is True
    assert everything.allowed == ()


def test_empty_batch_is_not_all_banned() -> None:
    assert partition_tracks([], ["anything"]).all_banned is False
