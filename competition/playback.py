"""Playback collaborator interface.

The engine never drives audio or video itself. It emits intents to whatever
controller the host application plugs in.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from .songs import Song

_VIDEO_ID_PATTERN = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)")


def extract_video_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    match = _VIDEO_ID_PATTERN.search(url)
    return match.group(1) if match else None


class PlaybackController(Protocol):
    def play(self, song: Song) -> None: ...

    def reveal(self, song: Song) -> None: ...

    def stop(self) -> None: ...


class NullPlayback:
    """Controller used when the host has no player attached."""

    def play(self, song: Song) -> None:
        return None

    def reveal(self, song: Song) -> None:
        return None

    def stop(self) -> None:
        return None


@dataclass(frozen=True)
class PlaybackIntent:
    action: str
    external_id: Optional[str] = None
    video_id: Optional[str] = None


@dataclass
class RecordingPlayback:
    """Keep every intent so a remote front end can replay them."""

    intents: List[PlaybackIntent] = field(default_factory=list)

    def play(self, song: Song) -> None:
        self.intents.append(PlaybackIntent("play", song.external_id, extract_video_id(song.media_url)))

    def reveal(self, song: Song) -> None:
        self.intents.append(PlaybackIntent("reveal", song.external_id, extract_video_id(song.media_url)))

    def stop(self) -> None:
        self.intents.append(PlaybackIntent("stop"))

    @property
    def last(self) -> Optional[PlaybackIntent]:
        return self.intents[-1] if self.intents else None

    def drain(self) -> List[PlaybackIntent]:
        drained, self.intents = self.intents, []
        return drained
