"""Convenience service layer for UI and API consumers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from .game import CompetitionEngine, SkipAccepted, SkipResult
from .playback import PlaybackController, extract_video_id
from .roster import Player
from .scoring import Category, max_turn_points
from .settings import CompetitionSettings
from .songs import NoMatch, ScanResult, Song, SongFound, deserialize_song, serialize_song


@dataclass(frozen=True)
class PlayerView:
    id: int
    name: str
    score: int
    skips_used: int
    skips_left: int
    artist_points: int
    title_points: int
    year_points: int
    bonus_points: int


@dataclass(frozen=True)
class TurnView:
    player_id: int
    phase: str
    guessed: dict
    revealed: bool
    external_id: Optional[str]
    video_id: Optional[str]
    answer: Optional[dict]


@dataclass(frozen=True)
class ScanView:
    matched: bool
    raw: Optional[str]
    external_id: Optional[str]


@dataclass(frozen=True)
class StatsView:
    total_rounds: int
    total_songs_played: int
    elapsed_minutes: int
    was_sudden_death: bool
    sudden_death_rounds: int
    song_list_views: int


@dataclass(frozen=True)
class CompetitionView:
    status: str
    game_mode: str
    round: int
    current_player: PlayerView
    turn: Optional[TurnView]
    leaderboard: list[PlayerView]
    contenders: list[int]
    songs_remaining: int
    songs_total: int
    max_turn_points: int
    no_more_turns: bool
    can_skip: bool
    game_over: bool
    winners: list[PlayerView]
    finish_reason: Optional[str]
    final_scores: Optional[dict]
    final_standings: Optional[list[dict]]
    stats: StatsView
    last_scan: Optional[ScanView]
    last_skip: Optional[dict]


SongInput = Union[Song, Mapping[str, Any]]


class CompetitionService:
    """Facade around CompetitionEngine for UI consumers."""

    def __init__(self, engine: CompetitionEngine) -> None:
        self.engine = engine
        self._last_scan: Optional[ScanView] = None
        self._last_skip: Optional[dict] = None

    @classmethod
    def start(
        cls,
        settings: Union[CompetitionSettings, Mapping[str, Any]],
        songs: Sequence[SongInput],
        *,
        playback: Optional[PlaybackController] = None,
        **engine_kwargs: Any,
    ) -> "CompetitionService":
        song_records = [song if isinstance(song, Song) else deserialize_song(song) for song in songs]
        return cls(CompetitionEngine(settings, song_records, playback=playback, **engine_kwargs))

    # Actions -----------------------------------------------------------

    def scan(self, scanned: str) -> CompetitionView:
        self._last_scan = self._scan_view(self.engine.submit_scan(scanned))
        return self.get_view()

    def scan_failed(self) -> CompetitionView:
        self._last_scan = self._scan_view(self.engine.scan_failed())
        return self.get_view()

    def toggle_guess(self, category: str) -> CompetitionView:
        self.engine.toggle_guess(Category(category))
        return self.get_view()

    def set_guess(self, category: str, correct: bool) -> CompetitionView:
        self.engine.set_guess(Category(category), correct)
        return self.get_view()

    def reveal(self) -> CompetitionView:
        self.engine.reveal()
        return self.get_view()

    def release_song(self) -> CompetitionView:
        self.engine.release_song()
        self._last_scan = None
        return self.get_view()

    def complete_turn(self) -> CompetitionView:
        self.engine.complete_turn()
        self._last_scan = None
        self._last_skip = None
        return self.get_view()

    def skip(self) -> CompetitionView:
        self._last_skip = self._skip_payload(self.engine.skip())
        if self._last_skip["accepted"]:
            self._last_scan = None
        return self.get_view()

    def poll(self) -> CompetitionView:
        if not self.engine.is_over:
            self.engine.poll()
        return self.get_view()

    def song_list_view(self) -> CompetitionView:
        self.engine.record_song_list_view()
        return self.get_view()

    def available_songs(self) -> list[dict]:
        return [serialize_song(song) for song in self.engine.pool.available()]

    def quit(self) -> CompetitionView:
        self.engine.quit()
        return self.get_view()

    # Views -------------------------------------------------------------

    def get_view(self) -> CompetitionView:
        engine = self.engine
        stats = engine.stats()
        result = engine.result
        current = engine.current_player
        return CompetitionView(
            status=engine.status.value,
            game_mode=engine.settings.game_mode.value,
            round=engine.round,
            current_player=self._player_view(current),
            turn=self._turn_view(),
            leaderboard=[self._player_view(player) for player in engine.roster.leaderboard()],
            contenders=list(engine.contenders),
            songs_remaining=engine.pool.remaining(),
            songs_total=len(engine.pool),
            max_turn_points=max_turn_points(
                engine.settings.point_values,
                year_scoring_enabled=engine.pool.year_data_available,
            ),
            no_more_turns=engine.no_more_turns,
            can_skip=not engine.is_over and current.skips_used < engine.settings.skips_per_player,
            game_over=engine.is_over,
            winners=[self._player_view(player) for player in engine.winners],
            finish_reason=result.reason.value if result else None,
            final_scores={str(pid): score for pid, score in result.scores.items()} if result else None,
            final_standings=self._final_standings(),
            stats=StatsView(
                total_rounds=stats.total_rounds,
                total_songs_played=stats.total_songs_played,
                elapsed_minutes=stats.elapsed_minutes,
                was_sudden_death=stats.was_sudden_death,
                sudden_death_rounds=stats.sudden_death_rounds,
                song_list_views=stats.song_list_views,
            ),
            last_scan=self._last_scan,
            last_skip=self._last_skip,
        )

    # Helpers -----------------------------------------------------------

    def _player_view(self, player: Player) -> PlayerView:
        return PlayerView(
            id=player.id,
            name=player.name,
            score=player.score,
            skips_used=player.skips_used,
            skips_left=self.engine.settings.skips_per_player - player.skips_used,
            artist_points=player.artist_points,
            title_points=player.title_points,
            year_points=player.year_points,
            bonus_points=player.bonus_points,
        )

    def _turn_view(self) -> Optional[TurnView]:
        turn = self.engine.turn
        if turn is None:
            return None
        song = turn.song
        answer = None
        if song is not None and turn.revealed:
            answer = {"artist": song.artist, "title": song.title, "year": song.year}
        return TurnView(
            player_id=turn.player_id,
            phase=turn.phase.value,
            guessed={"artist": turn.guessed.artist, "title": turn.guessed.title, "year": turn.guessed.year},
            revealed=turn.revealed,
            external_id=song.external_id if song else None,
            video_id=extract_video_id(song.media_url) if song else None,
            answer=answer,
        )

    def _final_standings(self) -> Optional[list[dict]]:
        """Ranking by the scores the winners were decided on.

        After pool exhaustion these are the totals of the last full round,
        which can differ from the live leaderboard.
        """
        result = self.engine.result
        if result is None:
            return None
        ranked = sorted(result.scores.items(), key=lambda item: -item[1])
        return [
            {"id": player_id, "name": self.engine.roster[player_id].name, "score": score}
            for player_id, score in ranked
        ]

    def _scan_view(self, result: ScanResult) -> ScanView:
        if isinstance(result, SongFound):
            return ScanView(matched=True, raw=None, external_id=result.song.external_id)
        assert isinstance(result, NoMatch)
        return ScanView(matched=False, raw=result.raw, external_id=None)

    def _skip_payload(self, result: SkipResult) -> dict:
        if isinstance(result, SkipAccepted):
            return {
                "accepted": True,
                "player_id": result.player_id,
                "points_deducted": result.points_deducted,
                "skips_left": result.skips_left,
            }
        return {"accepted": False, "player_id": result.player_id, "reason": result.reason}
