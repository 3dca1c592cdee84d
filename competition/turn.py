"""Single-turn state machine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from .scoring import Category, Guesses
from .songs import Song


class InvalidTurnAction(RuntimeError):
    """Raised when a turn action is not allowed in the current phase."""


class TurnPhase(Enum):
    AWAITING_SCAN = "awaiting-scan"
    RESOLVED = "resolved"
    REVEALED = "revealed"
    COMPLETED = "completed"
    SKIPPED = "skipped"


_SONG_PHASES = {TurnPhase.RESOLVED, TurnPhase.REVEALED}
_END_PHASES = {TurnPhase.COMPLETED, TurnPhase.SKIPPED}


@dataclass
class Turn:
    """One player's encounter with one song."""

    player_id: int
    song: Optional[Song] = None
    phase: TurnPhase = TurnPhase.AWAITING_SCAN
    guessed: Guesses = field(default_factory=Guesses)

    @property
    def revealed(self) -> bool:
        return self.phase is TurnPhase.REVEALED

    @property
    def is_over(self) -> bool:
        return self.phase in _END_PHASES

    def resolve(self, song: Song) -> None:
        self._ensure_phase(TurnPhase.AWAITING_SCAN)
        self.song = song
        self.phase = TurnPhase.RESOLVED

    def set_guess(self, category: Category, correct: bool) -> Guesses:
        self._ensure_song()
        self.guessed = replace(self.guessed, **{Category(category).value: bool(correct)})
        return self.guessed

    def toggle_guess(self, category: Category) -> Guesses:
        self._ensure_song()
        return self.set_guess(category, not self.guessed.get(category))

    def reveal(self) -> None:
        self._ensure_song()
        self.phase = TurnPhase.REVEALED

    def release_song(self) -> Song:
        """Put the resolved song back and wait for another scan."""
        self._ensure_song()
        assert self.song is not None
        song = self.song
        self.song = None
        self.guessed = Guesses()
        self.phase = TurnPhase.AWAITING_SCAN
        return song

    def complete(self) -> Guesses:
        self._ensure_song()
        self.phase = TurnPhase.COMPLETED
        return self.guessed

    def skip(self) -> Optional[Song]:
        if self.is_over:
            raise InvalidTurnAction(f"Turn already {self.phase.value}.")
        self.phase = TurnPhase.SKIPPED
        self.guessed = Guesses()
        return self.song

    def _ensure_song(self) -> None:
        if self.phase not in _SONG_PHASES:
            raise InvalidTurnAction(f"No song in play (turn is {self.phase.value}).")

    def _ensure_phase(self, expected: TurnPhase) -> None:
        if self.phase is not expected:
            raise InvalidTurnAction(f"Action not allowed in phase {self.phase.value}. Expected {expected.value}.")
