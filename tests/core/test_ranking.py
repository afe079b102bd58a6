from tunequeue.core.ranking import (
    BOTH_MATCH_SCORE,
    TITLE_MATCH_SCORE,
    TRACK_RANKER,
    rank_albums,
    rank_playlists,
    rank_tracks,
)
from tunequeue.core.types import Album, Playlist, Track


def test_artist_and_title_match_beats_cover_band() -> None:
    cover = Track(name="Yesterday", artist="Beatles Cover Band", popularity=10)
    original = Track(name="Yesterday", artist="The Beatles", popularity=90)

    ranked = rank_tracks([cover, original], "beatles - yesterday")

    assert ranked == [original, cover]


def test_segmented_term_scores_tiers() -> None:
    original = Track(name="Yesterday", artist="The Beatles", popularity=10)
    other_song = Track(name="Let It Be", artist="The Beatles", popularity=95)
    cover = Track(name="Yesterday", artist="Cover Kids", popularity=99)

    scored = TRACK_RANKER.score([other_song, cover, original], "yesterday by the beatles")

    assert [candidate.item for candidate in scored] == [original, cover, other_song]
    assert scored[0].score == BOTH_MATCH_SCORE + TITLE_MATCH_SCORE + 2_000
    assert scored[1].score == TITLE_MATCH_SCORE


def test_unsegmented_term_weights_title_over_artist() -> None:
    adele = Track(name="Hello", artist="Adele", popularity=50)
    lionel = Track(name="Hello", artist="Lionel Richie", popularity=90)
    other = Track(name="Someone Like You", artist="Adele", popularity=99)

    scored = TRACK_RANKER.score([other, lionel, adele], "hello adele")

    assert [candidate.item for candidate in scored] == [adele, lionel, other]
    assert [candidate.score for candidate in scored] == [1_500, 1_000, 500]


def test_accents_are_folded() -> None:
    original = Track(name="Halo", artist="Beyoncé", popularity=10)
    cover = Track(name="Halo", artist="Cover Artist", popularity=90)

    assert rank_tracks([cover, original], "beyonce - halo") == [original, cover]


def test_ties_fall_back_to_popularity() -> None:
    low = Track(name="Alpha", artist="One", popularity=5)
    high = Track(name="Beta", artist="Two", popularity=60)
    unknown = Track(name="Gamma", artist="Three")

    assert rank_tracks([low, unknown, high], "zzz") == [high, low, unknown]


def test_ranking_is_deterministic() -> None:
    tracks = [
        Track(name="Yesterday", artist="The Beatles", popularity=90),
        Track(name="Yesterday", artist="Boyz II Men", popularity=40),
        Track(name="Yesterday Once More", artist="Carpenters", popularity=70),
    ]

    assert rank_tracks(tracks, "yesterday") == rank_tracks(list(tracks), "yesterday")


def test_blank_term_keeps_input_order() -> None:
    tracks = [Track(name="B", popularity=1), Track(name="A", popularity=99)]

    assert rank_tracks(tracks, "  ") == tracks
    assert rank_tracks([], "anything") == []


def test_albums_use_popularity_tie_break() -> None:
    deluxe = Album(name="Abbey Road (Deluxe)", artist="The Beatles", popularity=70)
    tribute = Album(name="Abbey Road Tribute", artist="Studio Musicians", popularity=95)

    assert rank_albums([tribute, deluxe], "beatles - abbey road") == [deluxe, tribute]


def test_playlists_rank_by_owner_and_followers() -> None:
    small = Playlist(name="Christmas Hits", owner="someone", followers=10)
    large = Playlist(name="Christmas Hits", owner="spotify", followers=5_000)
    unrelated = Playlist(name="Workout", owner="spotify", followers=90_000)

    assert rank_playlists([unrelated, small, large], "christmas hits") == [large, small, unrelated]
