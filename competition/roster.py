"""Players and their running totals."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .scoring import ScoreBreakdown


@dataclass
class Player:
    id: int
    name: str
    score: int = 0
    skips_used: int = 0
    artist_points: int = 0
    title_points: int = 0
    year_points: int = 0
    bonus_points: int = 0


class PlayerRoster:
    """Ordered players; only completed turns and skips change their totals."""

    def __init__(self, players: Sequence[Player]) -> None:
        if not players:
            raise ValueError("A roster needs at least one player.")
        self._players: List[Player] = list(players)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "PlayerRoster":
        return cls([Player(id=index, name=name) for index, name in enumerate(names)])

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self):
        return iter(self._players)

    def __getitem__(self, player_id: int) -> Player:
        return self._players[player_id]

    def apply(self, player_id: int, breakdown: ScoreBreakdown) -> Player:
        player = self._players[player_id]
        player.artist_points += breakdown.artist
        player.title_points += breakdown.title
        player.year_points += breakdown.year
        player.bonus_points += breakdown.bonus
        player.score += breakdown.total
        return player

    def charge_skip(self, player_id: int, cost: int) -> int:
        """Spend one skip; returns the points actually deducted."""
        player = self._players[player_id]
        deducted = min(cost, player.score)
        player.score -= deducted
        player.skips_used += 1
        return deducted

    def leaderboard(self) -> List[Player]:
        # sorted() is stable, so equal scores keep seating order.
        return sorted(self._players, key=lambda player: -player.score)

    def next_player_index(self, current: int) -> int:
        return (current + 1) % len(self._players)

    def scores(self) -> Dict[int, int]:
        return {player.id: player.score for player in self._players}

    def leaders(
        self,
        ids: Optional[Iterable[int]] = None,
        scores: Optional[Mapping[int, int]] = None,
    ) -> List[int]:
        """Return the ids sharing the highest score among ``ids``."""
        table = scores if scores is not None else self.scores()
        candidates = list(ids) if ids is not None else [player.id for player in self._players]
        best = max(table[player_id] for player_id in candidates)
        return [player_id for player_id in candidates if table[player_id] == best]
