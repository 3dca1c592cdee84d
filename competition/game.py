"""High-level orchestration of a competition game."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

import structlog

from .modes import FinishReason, Finished, GameModeEvaluator, RoundProgress, SuddenDeath
from .playback import NullPlayback, PlaybackController
from .roster import Player, PlayerRoster
from .scoring import Category, Guesses, ScoreBreakdown, score_turn
from .settings import CompetitionSettings, InvalidSettings
from .songs import NoMatch, ScanResult, Song, SongFound, SongPool
from .turn import InvalidTurnAction, Turn

logger = structlog.get_logger()


class GameOver(RuntimeError):
    """Raised when an action arrives after the game has ended."""


class GameStatus(Enum):
    PLAYING = "playing"
    SUDDEN_DEATH = "sudden-death"
    FINISHED = "finished"
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class SkipAccepted:
    player_id: int
    points_deducted: int
    skips_left: int
    song: Optional[Song] = None


@dataclass(frozen=True)
class SkipRefused:
    player_id: int
    reason: str


SkipResult = Union[SkipAccepted, SkipRefused]


@dataclass(frozen=True)
class GameStats:
    total_rounds: int
    total_songs_played: int
    elapsed_minutes: int
    was_sudden_death: bool
    sudden_death_rounds: int = 0
    song_list_views: int = 0


class CompetitionEngine:
    """Single authoritative state machine for one competition game."""

    def __init__(
        self,
        settings: Union[CompetitionSettings, Mapping[str, Any]],
        songs: Sequence[Song],
        *,
        playback: Optional[PlaybackController] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(settings, Mapping):
            settings = CompetitionSettings.from_payload(settings)
        if not isinstance(settings, CompetitionSettings):
            raise InvalidSettings("Settings must be a CompetitionSettings instance or mapping.")

        self.settings = settings
        self.pool = SongPool(songs)
        self.roster = PlayerRoster.from_names(settings.player_names)
        self.evaluator = GameModeEvaluator(settings)
        self.playback: PlaybackController = playback or NullPlayback()

        self._clock = clock
        self._started_at = clock()
        self._ended_at: Optional[float] = None

        self.status = GameStatus.PLAYING
        self.contenders: Tuple[int, ...] = tuple(player.id for player in self.roster)
        self.round = 1
        self.turn: Optional[Turn] = None
        self.result: Optional[Finished] = None
        self.no_more_turns = False
        self.was_sudden_death = False
        self.sudden_death_rounds = 0
        self.song_list_views = 0
        self._seat = 0
        self._turns_this_round = 0
        self._round_scores: Dict[int, int] = self.roster.scores()

        logger.info(
            "competition started",
            mode=settings.game_mode,
            players=settings.number_of_players,
            songs=len(self.pool),
            year_data=self.pool.year_data_available,
        )
        self._check_songs_for_round()

    # State ---------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return self.status in (GameStatus.FINISHED, GameStatus.ABANDONED)

    @property
    def current_player(self) -> Player:
        return self.roster[self.contenders[self._seat]]

    @property
    def winners(self) -> Tuple[Player, ...]:
        if self.result is None:
            return ()
        return tuple(self.roster[player_id] for player_id in self.result.winner_ids)

    def elapsed_seconds(self) -> float:
        end = self._ended_at if self._ended_at is not None else self._clock()
        return max(0.0, end - self._started_at)

    def stats(self) -> GameStats:
        completed = self.round - 1
        return GameStats(
            total_rounds=completed + (1 if self._turns_this_round else 0),
            total_songs_played=len(self.pool.used),
            elapsed_minutes=int(self.elapsed_seconds() // 60),
            was_sudden_death=self.was_sudden_death,
            sudden_death_rounds=self.sudden_death_rounds,
            song_list_views=self.song_list_views,
        )

    # Turn actions --------------------------------------------------------

    def begin_turn(self) -> Turn:
        self._ensure_active()
        if self.turn is None:
            self.turn = Turn(player_id=self.current_player.id)
        return self.turn

    def submit_scan(self, scanned: str) -> ScanResult:
        turn = self.begin_turn()
        if turn.song is not None:
            raise InvalidTurnAction("A song is already in play for this turn.")
        result = self.pool.resolve(scanned)
        if isinstance(result, SongFound):
            turn.resolve(result.song)
            self.playback.play(result.song)
            logger.info("scan matched", player=turn.player_id, external_id=result.song.external_id)
        else:
            logger.info("scan not matched", player=turn.player_id, scanned=scanned)
        return result

    def scan_failed(self) -> NoMatch:
        self.begin_turn()
        logger.info("scan failed", player=self.current_player.id)
        return NoMatch(raw="")

    def set_guess(self, category: Category, correct: bool) -> Guesses:
        return self._require_turn().set_guess(category, correct)

    def toggle_guess(self, category: Category) -> Guesses:
        return self._require_turn().toggle_guess(category)

    def reveal(self) -> Song:
        turn = self._require_turn()
        turn.reveal()
        assert turn.song is not None
        self.playback.reveal(turn.song)
        return turn.song

    def release_song(self) -> Song:
        """Return to scanning without consuming the resolved song."""
        song = self._require_turn().release_song()
        self.playback.stop()
        logger.info("song released", player=self.current_player.id, external_id=song.external_id)
        return song

    def complete_turn(self) -> ScoreBreakdown:
        turn = self._require_turn()
        guesses = turn.complete()
        assert turn.song is not None
        breakdown = score_turn(
            guesses,
            self.settings.point_values,
            turn.song,
            year_scoring_enabled=self.pool.year_data_available,
        )
        player = self.roster.apply(turn.player_id, breakdown)
        self.pool.mark_used(turn.song)
        self.playback.stop()
        logger.info(
            "turn completed",
            player=player.id,
            external_id=turn.song.external_id,
            points=breakdown.total,
            score=player.score,
        )
        self._advance()
        return breakdown

    def skip(self) -> SkipResult:
        self._ensure_active()
        player = self.current_player
        if player.skips_used >= self.settings.skips_per_player:
            logger.info("skip refused", player=player.id, skips_used=player.skips_used)
            return SkipRefused(player_id=player.id, reason="No skips left.")

        turn = self.turn or Turn(player_id=player.id)
        song = turn.skip()
        deducted = self.roster.charge_skip(player.id, self.settings.skip_cost)
        if song is not None:
            self.pool.mark_used(song)
            self.playback.stop()
        logger.info("skip accepted", player=player.id, deducted=deducted, score=player.score)
        result = SkipAccepted(
            player_id=player.id,
            points_deducted=deducted,
            skips_left=self.settings.skips_per_player - player.skips_used,
            song=song,
        )
        self._advance()
        return result

    # Game-level actions --------------------------------------------------

    def poll(self) -> Optional[Finished]:
        """Re-check the clock of a time-based game between rounds."""
        self._ensure_active()
        # A turn without a song (failed or unmatched scan) still counts as idle.
        idle = self.turn is None or self.turn.song is None
        at_boundary = idle and self._turns_this_round == 0 and self.round > 1
        if (
            self.status is GameStatus.PLAYING
            and at_boundary
            and self.evaluator.time_expired(self.elapsed_seconds())
        ):
            leaders = tuple(self.roster.leaders())
            self._finish(Finished(leaders, FinishReason.TIME_EXPIRED, self.roster.scores()))
        return self.result

    def record_song_list_view(self) -> int:
        self.song_list_views += 1
        return self.song_list_views

    def quit(self) -> None:
        if self.is_over:
            return
        self.status = GameStatus.ABANDONED
        self.turn = None
        self._ended_at = self._clock()
        self.playback.stop()
        logger.info("competition abandoned", round=self.round)

    # Helpers -------------------------------------------------------------

    def _advance(self) -> None:
        self.turn = None
        self._turns_this_round += 1
        self._seat += 1
        round_finished = self._seat >= len(self.contenders)
        if round_finished:
            self._close_round()

        progress = RoundProgress(
            completed_rounds=self.round - 1,
            round_finished=round_finished,
            elapsed_seconds=self.elapsed_seconds(),
            songs_remaining=self.pool.remaining(),
            contenders=self.contenders,
            sudden_death=self.status is GameStatus.SUDDEN_DEATH,
        )
        outcome = self.evaluator.check(progress, self.roster)
        if isinstance(outcome, Finished):
            self._finish(outcome)
            return
        if isinstance(outcome, SuddenDeath):
            self._enter_sudden_death(outcome.contenders)
        if self.pool.exhausted():
            self._finish(self.evaluator.finalize_exhausted(self.roster, self._round_scores, self.contenders))
            return
        if round_finished:
            self._check_songs_for_round()

    def _close_round(self) -> None:
        logger.info("round completed", round=self.round, scores=self.roster.scores())
        if self.status is GameStatus.SUDDEN_DEATH:
            self.sudden_death_rounds += 1
        self._seat = 0
        self._turns_this_round = 0
        self.round += 1
        self._round_scores = self.roster.scores()

    def _enter_sudden_death(self, contenders: Tuple[int, ...]) -> None:
        self.status = GameStatus.SUDDEN_DEATH
        self.was_sudden_death = True
        self.contenders = contenders
        self._seat = 0
        logger.info("sudden death", contenders=list(contenders))

    def _check_songs_for_round(self) -> None:
        if self.no_more_turns or self.pool.remaining() >= len(self.contenders):
            return
        self.no_more_turns = True
        logger.warning(
            "not enough songs for another full round",
            remaining=self.pool.remaining(),
            players=len(self.contenders),
        )

    def _finish(self, outcome: Finished) -> None:
        self.status = GameStatus.FINISHED
        self.result = outcome
        self.turn = None
        self._ended_at = self._clock()
        logger.info(
            "competition finished",
            reason=outcome.reason,
            winners=list(outcome.winner_ids),
            scores=dict(outcome.scores),
        )

    def _require_turn(self) -> Turn:
        self._ensure_active()
        if self.turn is None:
            raise InvalidTurnAction("No turn in progress.")
        return self.turn

    def _ensure_active(self) -> None:
        if self.is_over:
            raise GameOver(f"Game is {self.status.value}.")
