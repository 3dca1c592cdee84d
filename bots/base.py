"""Common guesser interfaces for simulated players."""

from __future__ import annotations

from competition.game import CompetitionEngine
from competition.scoring import Guesses
from competition.songs import Song


class GuesserBot:
    """Base class for simulated players."""

    name: str = "BaseGuesser"

    def on_game_start(self, engine: CompetitionEngine) -> None:
        """Optional hook invoked once before the first turn."""
        return None

    def wants_skip(self, engine: CompetitionEngine, song: Song) -> bool:
        """Return True to spend a skip on the song in play."""
        return False

    def wants_reveal(self, engine: CompetitionEngine, song: Song) -> bool:
        return False

    def guess(self, engine: CompetitionEngine, song: Song) -> Guesses:
        """Return which categories the player got right."""
        return Guesses()


class PerfectGuesser(GuesserBot):
    name = "Perfect"

    def guess(self, engine: CompetitionEngine, song: Song) -> Guesses:
        return Guesses(artist=True, title=True, year=True)
