"""Song records and the non-repeating song pool."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Set, Tuple, Union

import structlog

logger = structlog.get_logger()


class SongPoolError(ValueError):
    """Raised when the song pool is built or used incorrectly."""


@dataclass(frozen=True)
class Song:
    """Immutable song record as delivered by the song-list collaborator."""

    external_id: str
    title: str
    artist: str
    year: Optional[str] = None
    media_url: Optional[str] = None

    @property
    def has_year(self) -> bool:
        return bool(self.year)


@dataclass(frozen=True)
class SongFound:
    song: Song


@dataclass(frozen=True)
class NoMatch:
    raw: str


ScanResult = Union[SongFound, NoMatch]


def serialize_song(song: Song) -> dict[str, Optional[str]]:
    return {
        "external_id": song.external_id,
        "title": song.title,
        "artist": song.artist,
        "year": song.year,
        "media_url": song.media_url,
    }


def deserialize_song(payload: Mapping[str, Optional[str]]) -> Song:
    external_id = payload.get("external_id") or payload.get("hitster_url")
    if not external_id:
        raise SongPoolError("Song record is missing its identifier.")
    for key in ("title", "artist"):
        if not payload.get(key):
            raise SongPoolError(f"Song {external_id!r} is missing {key}.")
    year = payload.get("year")
    if year is not None:
        year = str(year).strip() or None
    return Song(
        external_id=str(external_id),
        title=str(payload["title"]),
        artist=str(payload["artist"]),
        year=year,
        media_url=payload.get("media_url") or payload.get("youtube_url") or None,
    )


def song_label(song: Song) -> str:
    if song.year:
        return f"{song.artist} - {song.title} ({song.year})"
    return f"{song.artist} - {song.title}"


def _matches(candidate: str, scanned: str) -> bool:
    return candidate == scanned or scanned in candidate or candidate in scanned


class SongPool:
    """Track which songs of the active list have been consumed."""

    def __init__(self, songs: Iterable[Song]) -> None:
        unique: List[Song] = []
        seen: Set[str] = set()
        for song in songs:
            if song.external_id in seen:
                logger.warning("duplicate song identifier ignored", external_id=song.external_id)
                continue
            seen.add(song.external_id)
            unique.append(song)
        if not unique:
            raise SongPoolError("Song list must contain at least one song.")
        self._all: Tuple[Song, ...] = tuple(unique)
        self._used: Set[str] = set()
        self.year_data_available = any(song.has_year for song in self._all)

    @property
    def all(self) -> Tuple[Song, ...]:
        return self._all

    @property
    def used(self) -> frozenset[str]:
        return frozenset(self._used)

    def available(self) -> List[Song]:
        return [song for song in self._all if song.external_id not in self._used]

    def resolve(self, scanned: str) -> ScanResult:
        """Match a scanned identifier against the unused songs.

        The card identifier may be embedded in a longer scanned string or the
        other way round, so a substring match in either direction counts.
        """
        needle = scanned.strip().lower()
        if not needle:
            return NoMatch(raw=scanned)
        for song in self.available():
            if _matches(song.external_id.strip().lower(), needle):
                return SongFound(song=song)
        return NoMatch(raw=scanned)

    def mark_used(self, song: Song) -> None:
        if song not in self._all:
            raise SongPoolError(f"Song {song.external_id!r} is not part of this list.")
        self._used.add(song.external_id)

    def is_used(self, song: Song) -> bool:
        return song.external_id in self._used

    def remaining(self) -> int:
        return len(self._all) - len(self._used)

    def exhausted(self) -> bool:
        return self.remaining() == 0

    def __len__(self) -> int:
        return len(self._all)
