"""Random guesser used for simulations."""

from __future__ import annotations

import random
from typing import Optional

from competition.game import CompetitionEngine
from competition.scoring import Guesses
from competition.songs import Song

from .base import GuesserBot


class RandomGuesser(GuesserBot):
    name = "Random"

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        accuracy: float = 0.5,
        skip_rate: float = 0.1,
    ) -> None:
        self._rng = random.Random(seed)
        self.accuracy = accuracy
        self.skip_rate = skip_rate

    def wants_skip(self, engine: CompetitionEngine, song: Song) -> bool:
        return self._rng.random() < self.skip_rate

    def wants_reveal(self, engine: CompetitionEngine, song: Song) -> bool:
        return self._rng.random() < 0.5

    def guess(self, engine: CompetitionEngine, song: Song) -> Guesses:
        return Guesses(
            artist=self._rng.random() < self.accuracy,
            title=self._rng.random() < self.accuracy,
            year=self._rng.random() < self.accuracy,
        )
