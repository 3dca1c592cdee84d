"""Validation schema for competition settings."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .scoring import PointValues

MIN_PLAYERS = 1
MAX_PLAYERS = 10


class InvalidSettings(ValueError):
    """Raised when a competition cannot be started with the given settings."""


class GameMode(str, Enum):
    POINTS = "points"
    TIME_BASED = "time-based"
    ROUNDS = "rounds"


class TieBreakPolicy(str, Enum):
    HIGHEST_SCORE = "highest-score"
    MULTIPLE_WINNERS = "multiple-winners"
    SUDDEN_DEATH = "sudden-death"


class CompetitionSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    number_of_players: int = Field(2, ge=MIN_PLAYERS, le=MAX_PLAYERS)
    game_mode: GameMode = GameMode.POINTS
    target_score: int = Field(15, gt=0, description="Points needed to win in points mode.")
    game_duration_minutes: int = Field(30, gt=0, description="Length of a time-based game.")
    maximum_rounds: int = Field(10, gt=0, description="Number of rounds in rounds mode.")
    artist_points: int = Field(1, ge=0)
    title_points: int = Field(2, ge=0)
    year_points: int = Field(1, ge=0)
    bonus_points: int = Field(2, ge=0, description="Awarded when artist, title and year are all correct.")
    skips_per_player: int = Field(3, ge=0)
    skip_cost: int = Field(0, ge=0)
    tie_break_policy: TieBreakPolicy = TieBreakPolicy.SUDDEN_DEATH
    player_names: tuple[str, ...]

    @field_validator("player_names", mode="before")
    @classmethod
    def strip_names(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(name.strip() if isinstance(name, str) else name for name in value)
        return value

    @field_validator("player_names")
    @classmethod
    def ensure_names_present(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for index, name in enumerate(value):
            if not name:
                raise ValueError(f"Player {index + 1} needs a name.")
        return value

    @model_validator(mode="after")
    def ensure_one_name_per_player(self) -> "CompetitionSettings":
        if len(self.player_names) != self.number_of_players:
            raise ValueError(
                f"Expected {self.number_of_players} player names, got {len(self.player_names)}."
            )
        return self

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CompetitionSettings":
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidSettings(str(exc)) from exc

    @property
    def point_values(self) -> PointValues:
        return PointValues(
            artist=self.artist_points,
            title=self.title_points,
            year=self.year_points,
            bonus=self.bonus_points,
        )
