"""Turn scoring helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .songs import Song


class Category(str, Enum):
    ARTIST = "artist"
    TITLE = "title"
    YEAR = "year"


@dataclass(frozen=True)
class Guesses:
    artist: bool = False
    title: bool = False
    year: bool = False

    def get(self, category: Category) -> bool:
        return getattr(self, Category(category).value)

    def all_correct(self) -> bool:
        return self.artist and self.title and self.year


@dataclass(frozen=True)
class PointValues:
    artist: int = 1
    title: int = 2
    year: int = 1
    bonus: int = 2


@dataclass(frozen=True)
class ScoreBreakdown:
    artist: int = 0
    title: int = 0
    year: int = 0
    bonus: int = 0

    @property
    def total(self) -> int:
        return self.artist + self.title + self.year + self.bonus


def max_turn_points(points: PointValues, *, year_scoring_enabled: bool = True) -> int:
    if not year_scoring_enabled:
        return points.artist + points.title
    return points.artist + points.title + points.year + points.bonus


def score_turn(
    guessed: Guesses,
    points: PointValues,
    song: Song,
    *,
    year_scoring_enabled: bool = True,
) -> ScoreBreakdown:
    """Convert a turn's guesses into points.

    Year and bonus points need year data: a song without a year, or a list
    without any year data, can only ever award artist and title points.
    """
    year_known = year_scoring_enabled and song.has_year
    return ScoreBreakdown(
        artist=points.artist if guessed.artist else 0,
        title=points.title if guessed.title else 0,
        year=points.year if guessed.year and year_known else 0,
        bonus=points.bonus if guessed.all_correct() and year_known else 0,
    )
