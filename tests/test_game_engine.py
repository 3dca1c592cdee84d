import pytest

from competition.game import CompetitionEngine, GameOver, GameStatus, SkipAccepted, SkipRefused
from competition.modes import FinishReason
from competition.playback import RecordingPlayback
from competition.scoring import Category
from competition.settings import InvalidSettings
from competition.songs import NoMatch, Song, SongFound
from competition.turn import InvalidTurnAction


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, minutes: float) -> None:
        self.now += minutes * 60


def songs(count, *, with_years=True):
    return [
        Song(
            external_id=f"https://hitstergame.com/en/{index:05d}",
            title=f"Title {index}",
            artist=f"Artist {index}",
            year=str(1970 + index) if with_years else None,
            media_url=f"https://youtu.be/video{index}",
        )
        for index in range(1, count + 1)
    ]


def settings(**overrides):
    values = {
        "number_of_players": 2,
        "player_names": ["Anna", "Bram"],
        "game_mode": "points",
        "target_score": 15,
        "artist_points": 1,
        "title_points": 2,
        "year_points": 1,
        "bonus_points": 2,
    }
    values.update(overrides)
    return values


def play(engine, *correct):
    """Scan the next unused song and complete the turn with the given categories."""
    song = engine.pool.available()[0]
    result = engine.submit_scan(song.external_id)
    assert isinstance(result, SongFound)
    for category in correct:
        engine.set_guess(Category(category), True)
    return engine.complete_turn()


def test_points_mode_first_to_target_wins():
    engine = CompetitionEngine(settings(), songs(10))

    breakdown = play(engine, "artist", "title", "year")
    assert breakdown.total == 6
    assert engine.roster[0].score == 6
    assert engine.current_player.name == "Bram"

    play(engine)
    play(engine, "artist", "title", "year")
    play(engine)
    assert not engine.is_over
    play(engine, "artist", "title", "year")

    assert engine.roster[0].score == 18
    assert engine.status is GameStatus.FINISHED
    assert engine.result.reason is FinishReason.TARGET_REACHED
    assert [player.name for player in engine.winners] == ["Anna"]


def test_round_counter_increments_once_per_full_cycle():
    engine = CompetitionEngine(settings(number_of_players=3, player_names=["A", "B", "C"]), songs(10))

    order = []
    for _ in range(6):
        order.append(engine.current_player.id)
        play(engine)

    assert order == [0, 1, 2, 0, 1, 2]
    assert engine.round == 3
    assert engine.stats().total_rounds == 2


def test_rounds_mode_tie_enters_sudden_death_and_separation_wins():
    engine = CompetitionEngine(
        settings(
            game_mode="rounds",
            maximum_rounds=1,
            tie_break_policy="sudden-death",
            artist_points=5,
        ),
        songs(10),
    )

    play(engine, "artist")
    play(engine, "artist")

    assert engine.status is GameStatus.SUDDEN_DEATH
    assert engine.stats().was_sudden_death
    assert engine.contenders == (0, 1)

    play(engine)
    assert not engine.is_over
    play(engine, "artist")

    assert engine.status is GameStatus.FINISHED
    assert engine.result.reason is FinishReason.SUDDEN_DEATH
    assert [player.name for player in engine.winners] == ["Bram"]
    assert engine.stats().sudden_death_rounds == 1


def test_sudden_death_only_rotates_through_tied_players():
    engine = CompetitionEngine(
        settings(
            number_of_players=3,
            player_names=["A", "B", "C"],
            game_mode="rounds",
            maximum_rounds=1,
            artist_points=5,
        ),
        songs(12),
    )
    play(engine)
    play(engine, "artist")
    play(engine, "artist")

    assert engine.contenders == (1, 2)
    seen = []
    for _ in range(4):
        seen.append(engine.current_player.id)
        play(engine)
    assert seen == [1, 2, 1, 2]
    assert engine.status is GameStatus.SUDDEN_DEATH


def test_rounds_mode_tie_shared_without_sudden_death():
    engine = CompetitionEngine(
        settings(game_mode="rounds", maximum_rounds=1, tie_break_policy="multiple-winners"),
        songs(10),
    )
    play(engine, "title")
    play(engine, "title")

    assert engine.status is GameStatus.FINISHED
    assert [player.id for player in engine.winners] == [0, 1]
    assert not engine.stats().was_sudden_death


def test_time_mode_lets_the_round_finish():
    clock = FakeClock()
    engine = CompetitionEngine(
        settings(game_mode="time-based", game_duration_minutes=10),
        songs(10),
        clock=clock,
    )

    play(engine, "title")
    clock.advance(11)
    assert engine.poll() is None
    assert not engine.is_over

    play(engine, "artist", "title")

    assert engine.status is GameStatus.FINISHED
    assert engine.result.reason is FinishReason.TIME_EXPIRED
    assert [player.name for player in engine.winners] == ["Bram"]
    assert engine.stats().elapsed_minutes == 11


def test_time_mode_poll_finishes_on_clean_round_boundary():
    clock = FakeClock()
    engine = CompetitionEngine(settings(game_mode="time-based", game_duration_minutes=10), songs(10), clock=clock)
    play(engine, "title")
    play(engine, "title")
    assert not engine.is_over

    clock.advance(10)
    result = engine.poll()

    assert result is not None
    assert result.winner_ids == (0, 1)
    assert engine.is_over


def test_time_mode_poll_finishes_after_unmatched_scan_at_boundary():
    clock = FakeClock()
    engine = CompetitionEngine(settings(game_mode="time-based", game_duration_minutes=1), songs(10), clock=clock)
    play(engine, "artist")
    play(engine)

    assert engine.submit_scan("nothing") == NoMatch(raw="nothing")
    clock.advance(5)
    result = engine.poll()

    assert result is not None
    assert result.reason is FinishReason.TIME_EXPIRED
    assert result.winner_ids == (0,)
    assert engine.turn is None


def test_time_mode_poll_waits_while_a_song_is_in_play():
    clock = FakeClock()
    engine = CompetitionEngine(settings(game_mode="time-based", game_duration_minutes=1), songs(10), clock=clock)
    play(engine)
    play(engine)

    engine.submit_scan(engine.pool.available()[0].external_id)
    clock.advance(5)

    assert engine.poll() is None
    assert not engine.is_over


def test_pool_exhaustion_finishes_with_last_full_round():
    engine = CompetitionEngine(settings(target_score=100), songs(3))

    play(engine, "artist", "title", "year")
    play(engine)
    assert engine.no_more_turns
    assert not engine.is_over

    play(engine, "artist", "title", "year")

    assert engine.status is GameStatus.FINISHED
    assert engine.result.reason is FinishReason.POOL_EXHAUSTED
    assert engine.result.scores == {0: 6, 1: 0}
    assert [player.name for player in engine.winners] == ["Anna"]
    assert engine.stats().total_songs_played == 3


def test_no_match_leaves_pool_and_turn_unchanged():
    engine = CompetitionEngine(settings(), songs(5))

    result = engine.submit_scan("https://example.com/not-a-card")

    assert result == NoMatch(raw="https://example.com/not-a-card")
    assert engine.pool.used == frozenset()
    assert engine.turn is not None and engine.turn.song is None
    assert isinstance(engine.submit_scan(songs(5)[0].external_id), SongFound)


def test_scan_failed_signal():
    engine = CompetitionEngine(settings(), songs(5))

    assert engine.scan_failed() == NoMatch(raw="")
    assert engine.pool.remaining() == 5


def test_skip_costs_points_consumes_song_and_is_limited():
    engine = CompetitionEngine(settings(skips_per_player=1, skip_cost=2, number_of_players=1, player_names=["Solo"]), songs(10))
    play(engine, "artist")
    assert engine.roster[0].score == 1

    song = engine.pool.available()[0]
    engine.submit_scan(song.external_id)
    result = engine.skip()

    assert isinstance(result, SkipAccepted)
    assert result.points_deducted == 1
    assert result.skips_left == 0
    assert engine.roster[0].score == 0
    assert engine.roster[0].skips_used == 1
    assert engine.pool.is_used(song)

    engine.submit_scan(engine.pool.available()[0].external_id)
    refused = engine.skip()
    assert isinstance(refused, SkipRefused)
    assert engine.roster[0].skips_used == 1
    assert engine.turn is not None and engine.turn.song is not None


def test_skip_without_song_does_not_consume():
    engine = CompetitionEngine(settings(), songs(5))

    result = engine.skip()

    assert isinstance(result, SkipAccepted)
    assert result.song is None
    assert engine.pool.remaining() == 5
    assert engine.current_player.name == "Bram"


def test_release_song_keeps_it_available():
    playback = RecordingPlayback()
    engine = CompetitionEngine(settings(), songs(5), playback=playback)
    first = songs(5)[0]

    engine.submit_scan(first.external_id)
    engine.set_guess(Category.ARTIST, True)
    engine.release_song()

    assert engine.pool.remaining() == 5
    assert engine.turn.guessed.artist is False
    assert isinstance(engine.submit_scan(first.external_id), SongFound)
    assert [intent.action for intent in playback.intents] == ["play", "stop", "play"]


def test_playback_intents_follow_the_turn():
    playback = RecordingPlayback()
    engine = CompetitionEngine(settings(), songs(5), playback=playback)

    engine.submit_scan(songs(5)[0].external_id)
    engine.reveal()
    engine.complete_turn()

    assert [intent.action for intent in playback.intents] == ["play", "reveal", "stop"]
    assert playback.intents[0].video_id == "video1"


def test_actions_out_of_phase_are_rejected():
    engine = CompetitionEngine(settings(), songs(5))

    with pytest.raises(InvalidTurnAction):
        engine.complete_turn()
    with pytest.raises(InvalidTurnAction):
        engine.toggle_guess(Category.ARTIST)

    engine.submit_scan(songs(5)[0].external_id)
    with pytest.raises(InvalidTurnAction):
        engine.submit_scan(songs(5)[1].external_id)


def test_year_scoring_disabled_when_list_has_no_years():
    engine = CompetitionEngine(settings(), songs(5, with_years=False))

    breakdown = play(engine, "artist", "title", "year")

    assert breakdown.total == 3
    assert not engine.pool.year_data_available


def test_quit_discards_game():
    engine = CompetitionEngine(settings(), songs(5))
    engine.submit_scan(songs(5)[0].external_id)

    engine.quit()

    assert engine.status is GameStatus.ABANDONED
    assert engine.turn is None
    with pytest.raises(GameOver):
        engine.skip()
    engine.quit()


def test_invalid_settings_reject_construction():
    with pytest.raises(InvalidSettings):
        CompetitionEngine(settings(player_names=["Anna", ""]), songs(5))
    with pytest.raises(InvalidSettings):
        CompetitionEngine(object(), songs(5))


def test_song_list_views_are_counted():
    engine = CompetitionEngine(settings(), songs(5))

    engine.record_song_list_view()
    engine.record_song_list_view()

    assert engine.stats().song_list_views == 2
