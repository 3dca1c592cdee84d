"""Win-condition evaluation for the three game modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Tuple, Union

from .roster import PlayerRoster
from .settings import CompetitionSettings, GameMode, TieBreakPolicy


class FinishReason(Enum):
    TARGET_REACHED = "target-reached"
    TIME_EXPIRED = "time-expired"
    ROUNDS_COMPLETE = "rounds-complete"
    SUDDEN_DEATH = "sudden-death"
    POOL_EXHAUSTED = "pool-exhausted"


@dataclass(frozen=True)
class RoundProgress:
    """Counters the evaluator needs after a finished turn.

    ``completed_rounds`` counts full rounds played so far (sudden-death rounds
    included). ``round_finished`` is True when the turn just taken closed a round.
    """

    completed_rounds: int
    round_finished: bool
    elapsed_seconds: float
    songs_remaining: int
    contenders: Tuple[int, ...]
    sudden_death: bool = False


@dataclass(frozen=True)
class Continue:
    pass


@dataclass(frozen=True)
class SuddenDeath:
    contenders: Tuple[int, ...]


@dataclass(frozen=True)
class Finished:
    winner_ids: Tuple[int, ...]
    reason: FinishReason
    scores: Mapping[int, int] = field(default_factory=dict)

    @property
    def shared(self) -> bool:
        return len(self.winner_ids) > 1


Outcome = Union[Continue, SuddenDeath, Finished]


class GameModeEvaluator:
    """Decide after every turn whether the game goes on."""

    def __init__(self, settings: CompetitionSettings) -> None:
        self.settings = settings

    def check(self, progress: RoundProgress, roster: PlayerRoster) -> Outcome:
        if progress.sudden_death:
            return self._check_sudden_death(progress, roster)

        mode = self.settings.game_mode
        if mode is GameMode.POINTS:
            return self._check_points(roster)
        if not progress.round_finished:
            return Continue()
        if mode is GameMode.TIME_BASED:
            if self.time_expired(progress.elapsed_seconds):
                return self._shared_win(roster, FinishReason.TIME_EXPIRED)
            return Continue()
        if mode is GameMode.ROUNDS:
            if progress.completed_rounds >= self.settings.maximum_rounds:
                return self._resolve_rounds(progress, roster)
            return Continue()
        raise ValueError(f"Unknown game mode: {mode!r}")

    def time_expired(self, elapsed_seconds: float) -> bool:
        if self.settings.game_mode is not GameMode.TIME_BASED:
            return False
        return elapsed_seconds >= self.settings.game_duration_minutes * 60

    def finalize_exhausted(
        self,
        roster: PlayerRoster,
        scores: Mapping[int, int],
        contenders: Tuple[int, ...],
    ) -> Finished:
        """Close a game whose pool can no longer supply turns.

        ``scores`` is the snapshot taken when the last full round ended.
        Sudden death needs songs, so any remaining tie is shared.
        """
        leaders = roster.leaders(contenders, scores=scores)
        return Finished(tuple(leaders), FinishReason.POOL_EXHAUSTED, dict(scores))

    def _check_points(self, roster: PlayerRoster) -> Outcome:
        reached = [player.id for player in roster if player.score >= self.settings.target_score]
        if reached:
            return Finished(tuple(reached), FinishReason.TARGET_REACHED, roster.scores())
        return Continue()

    def _resolve_rounds(self, progress: RoundProgress, roster: PlayerRoster) -> Outcome:
        leaders = roster.leaders()
        if len(leaders) == 1:
            return Finished(tuple(leaders), FinishReason.ROUNDS_COMPLETE, roster.scores())
        policy = self.settings.tie_break_policy
        if policy is TieBreakPolicy.SUDDEN_DEATH and progress.songs_remaining >= len(leaders):
            return SuddenDeath(tuple(leaders))
        # highest-score and multiple-winners both declare a shared win.
        return Finished(tuple(leaders), FinishReason.ROUNDS_COMPLETE, roster.scores())

    def _check_sudden_death(self, progress: RoundProgress, roster: PlayerRoster) -> Outcome:
        if not progress.round_finished:
            return Continue()
        leaders = roster.leaders(progress.contenders)
        if len(leaders) == 1:
            return Finished(tuple(leaders), FinishReason.SUDDEN_DEATH, roster.scores())
        return Continue()

    def _shared_win(self, roster: PlayerRoster, reason: FinishReason) -> Finished:
        return Finished(tuple(roster.leaders()), reason, roster.scores())
