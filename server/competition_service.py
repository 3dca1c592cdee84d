"""REST service exposing the competition engine to a browser front end."""

from __future__ import annotations

import uuid
from dataclasses import asdict
from typing import Any, Callable, Dict, Literal, Optional

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from competition.game import GameOver
from competition.logging import session_context, setup_logging
from competition.playback import RecordingPlayback
from competition.service import CompetitionService, CompetitionView
from competition.settings import InvalidSettings
from competition.songs import SongPoolError
from competition.turn import InvalidTurnAction
from server.settings import ServerSettings

logger = structlog.get_logger()


class SongPayload(BaseModel):
    external_id: str
    title: str
    artist: str
    year: Optional[str] = None
    media_url: Optional[str] = None


class StartRequest(BaseModel):
    settings: Dict[str, Any]
    songs: list[SongPayload]


class ScanRequest(BaseModel):
    data: str


class GuessRequest(BaseModel):
    category: Literal["artist", "title", "year"]
    correct: Optional[bool] = None


class SessionState:
    def __init__(self, service: CompetitionService, playback: RecordingPlayback) -> None:
        self.service = service
        self.playback = playback


def serialize_state(session: SessionState, view: CompetitionView) -> Dict[str, Any]:
    return {
        "state": asdict(view),
        "playback": [asdict(intent) for intent in session.playback.drain()],
    }


def ensure_session(request: Request, session_id: str) -> SessionState:
    session = request.app.state.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def run_action(session_id: str, session: SessionState, action: Callable[[], CompetitionView]) -> Dict[str, Any]:
    with session_context(session_id):
        try:
            view = action()
        except (InvalidTurnAction, GameOver) as exc:
            logger.info("action rejected", error=str(exc))
            raise HTTPException(status_code=409, detail=str(exc)) from exc
    return serialize_state(session, view)


def create_app(settings: Optional[ServerSettings] = None) -> FastAPI:
    if settings is None:
        settings = ServerSettings()

    app = FastAPI(title="HitReveal Competition Service")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.sessions = {}

    @app.post("/competitions")
    def start_competition(body: StartRequest, request: Request) -> Dict[str, Any]:
        sessions: Dict[str, SessionState] = request.app.state.sessions
        if len(sessions) >= settings.max_sessions:
            raise HTTPException(status_code=503, detail="Too many active competitions")
        playback = RecordingPlayback()
        try:
            service = CompetitionService.start(
                body.settings,
                [song.model_dump() for song in body.songs],
                playback=playback,
            )
        except (InvalidSettings, SongPoolError) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        session_id = uuid.uuid4().hex
        session = SessionState(service=service, playback=playback)
        sessions[session_id] = session
        logger.info("session created", session_id=session_id, active=len(sessions))
        payload = serialize_state(session, service.get_view())
        payload["session_id"] = session_id
        return payload

    @app.get("/competitions/{session_id}")
    def get_competition(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return serialize_state(session, session.service.get_view())

    @app.get("/competitions/{session_id}/songs")
    def list_available_songs(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return {"songs": session.service.available_songs()}

    @app.post("/competitions/{session_id}/scan")
    def scan(session_id: str, body: ScanRequest, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, lambda: session.service.scan(body.data))

    @app.post("/competitions/{session_id}/scan-failed")
    def scan_failed(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, session.service.scan_failed)

    @app.post("/competitions/{session_id}/guess")
    def guess(session_id: str, body: GuessRequest, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        if body.correct is None:
            return run_action(session_id, session, lambda: session.service.toggle_guess(body.category))
        return run_action(session_id, session, lambda: session.service.set_guess(body.category, body.correct))

    @app.post("/competitions/{session_id}/reveal")
    def reveal(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, session.service.reveal)

    @app.post("/competitions/{session_id}/release")
    def release(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, session.service.release_song)

    @app.post("/competitions/{session_id}/complete")
    def complete(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, session.service.complete_turn)

    @app.post("/competitions/{session_id}/skip")
    def skip(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, session.service.skip)

    @app.post("/competitions/{session_id}/poll")
    def poll(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, session.service.poll)

    @app.post("/competitions/{session_id}/song-list-view")
    def song_list_view(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        return run_action(session_id, session, session.service.song_list_view)

    @app.delete("/competitions/{session_id}")
    def quit_competition(session_id: str, request: Request) -> Dict[str, Any]:
        session = ensure_session(request, session_id)
        view = session.service.quit()
        del request.app.state.sessions[session_id]
        logger.info("session closed", session_id=session_id)
        return serialize_state(session, view)

    return app


server_settings = ServerSettings()
setup_logging(log_dir=server_settings.log_dir, name="server")
app = create_app(settings=server_settings)
