from competition.roster import PlayerRoster
from competition.scoring import ScoreBreakdown


def test_apply_tracks_categories_and_total():
    roster = PlayerRoster.from_names(["Anna", "Bram"])

    roster.apply(0, ScoreBreakdown(artist=1, title=2, year=1, bonus=2))
    roster.apply(0, ScoreBreakdown(title=2))

    anna = roster[0]
    assert anna.score == 8
    assert (anna.artist_points, anna.title_points, anna.year_points, anna.bonus_points) == (1, 4, 1, 2)
    assert roster[1].score == 0


def test_charge_skip_clamps_at_zero():
    roster = PlayerRoster.from_names(["Anna"])
    roster.apply(0, ScoreBreakdown(title=2))

    assert roster.charge_skip(0, 3) == 2
    assert roster[0].score == 0
    assert roster[0].skips_used == 1

    assert roster.charge_skip(0, 3) == 0
    assert roster[0].score == 0
    assert roster[0].skips_used == 2


def test_leaderboard_is_stable_for_ties():
    roster = PlayerRoster.from_names(["Anna", "Bram", "Cees"])
    roster.apply(1, ScoreBreakdown(title=2))
    roster.apply(2, ScoreBreakdown(title=2))

    assert [player.name for player in roster.leaderboard()] == ["Bram", "Cees", "Anna"]


def test_next_player_cycles_through_everyone():
    roster = PlayerRoster.from_names(["A", "B", "C", "D"])
    seen = []
    index = 0
    for _ in range(len(roster)):
        seen.append(index)
        index = roster.next_player_index(index)

    assert sorted(seen) == [0, 1, 2, 3]
    assert index == 0


def test_leaders_among_subset_and_snapshot():
    roster = PlayerRoster.from_names(["A", "B", "C"])
    roster.apply(0, ScoreBreakdown(title=5))
    roster.apply(1, ScoreBreakdown(title=3))
    roster.apply(2, ScoreBreakdown(title=3))

    assert roster.leaders() == [0]
    assert roster.leaders([1, 2]) == [1, 2]
    assert roster.leaders(scores={0: 1, 1: 4, 2: 4}) == [1, 2]
