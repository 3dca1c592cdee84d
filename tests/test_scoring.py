from itertools import product

from competition.scoring import Category, Guesses, PointValues, ScoreBreakdown, max_turn_points, score_turn
from competition.songs import Song

POINTS = PointValues(artist=1, title=2, year=1, bonus=2)
WITH_YEAR = Song("id-1", "Africa", "Toto", "1982")
WITHOUT_YEAR = Song("id-2", "Hey Jude", "The Beatles")


def test_all_correct_with_year_awards_bonus():
    result = score_turn(Guesses(True, True, True), POINTS, WITH_YEAR)

    assert result == ScoreBreakdown(artist=1, title=2, year=1, bonus=2)
    assert result.total == 6


def test_partial_guess_has_no_bonus():
    result = score_turn(Guesses(artist=True, title=True), POINTS, WITH_YEAR)

    assert result == ScoreBreakdown(artist=1, title=2)
    assert result.total == 3


def test_song_without_year_never_awards_year_or_bonus():
    result = score_turn(Guesses(True, True, True), POINTS, WITHOUT_YEAR)

    assert result.year == 0
    assert result.bonus == 0
    assert result.total == 3


def test_year_scoring_disabled_for_list():
    result = score_turn(Guesses(True, True, True), POINTS, WITH_YEAR, year_scoring_enabled=False)

    assert result == ScoreBreakdown(artist=1, title=2)


def test_every_guess_combination_is_bounded_and_deterministic():
    ceiling = max_turn_points(POINTS)
    for flags, song in product(product([False, True], repeat=3), [WITH_YEAR, WITHOUT_YEAR]):
        guessed = Guesses(*flags)
        first = score_turn(guessed, POINTS, song)
        assert first == score_turn(guessed, POINTS, song)
        assert 0 <= first.total <= ceiling
        if not song.has_year:
            assert first.year == 0 and first.bonus == 0


def test_zero_point_categories():
    points = PointValues(artist=0, title=0, year=0, bonus=5)

    assert score_turn(Guesses(True, True, True), points, WITH_YEAR).total == 5
    assert score_turn(Guesses(True, True, False), points, WITH_YEAR).total == 0


def test_guesses_lookup_by_category():
    guessed = Guesses(artist=True)

    assert guessed.get(Category.ARTIST)
    assert not guessed.get("title")
    assert not guessed.all_correct()


def test_turn_ceiling_without_year_data():
    assert max_turn_points(POINTS, year_scoring_enabled=False) == POINTS.artist + POINTS.title
