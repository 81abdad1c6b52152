"""
Room API endpoints - Player input in, render snapshots out
"""

import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from mystery_room.config import get_default_room
from mystery_room.engine.session import RoomSession
from mystery_room.models.state import RoomSnapshot
from mystery_room.models.validation import ActionResult

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory room sessions (state is lost on restart)
room_sessions: dict[str, RoomSession] = {}


class NewSessionRequest(BaseModel):
    """Request to enter a room"""

    room_id: str | None = None
    realtime: bool | None = None  # None follows MYSTERY_ROOM_REALTIME
    seed: int | None = None  # Fixes the pair-match shuffle


class NewSessionResponse(BaseModel):
    session_id: str
    room_id: str
    state: RoomSnapshot


class ActionResponse(BaseModel):
    """Outcome of an input plus the snapshot after it"""

    result: ActionResult
    state: RoomSnapshot


class ActivateRequest(BaseModel):
    puzzle_id: int


class KeyRequest(BaseModel):
    key: str


class MoveRequest(BaseModel):
    forward: float = 0.0
    strafe: float = 0.0


class LookRequest(BaseModel):
    dx: float = 0.0
    dy: float = 0.0


class AdvanceRequest(BaseModel):
    seconds: float


class NodeRequest(BaseModel):
    node_id: int


class EdgeRequest(BaseModel):
    index: int


class CardRequest(BaseModel):
    index: int


class ReleaseRequest(BaseModel):
    piece_id: int
    position: tuple[float, float, float]


def _get_session(session_id: str) -> RoomSession:
    session = room_sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Room session not found")
    session.sync()
    return session


def _respond(session: RoomSession, result: ActionResult) -> ActionResponse:
    return ActionResponse(result=result, state=session.get_snapshot())


@router.post("/new", response_model=NewSessionResponse)
async def new_session(request: NewSessionRequest):
    """Start a new room session"""
    room_id = request.room_id or get_default_room()
    try:
        session = RoomSession(room_id, realtime=request.realtime, seed=request.seed)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Room '{room_id}' not found")
    except ValueError as e:
        logger.error(f"Room '{room_id}' failed to load: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    room_sessions[session.session_id] = session
    return NewSessionResponse(
        session_id=session.session_id,
        room_id=session.room_id,
        state=session.get_snapshot(),
    )


@router.get("/state/{session_id}")
async def get_state(session_id: str):
    """Get the current render snapshot"""
    session = _get_session(session_id)
    return {"state": session.get_snapshot()}


@router.post("/{session_id}/activate", response_model=ActionResponse)
async def activate(session_id: str, request: ActivateRequest):
    """Click on a puzzle station"""
    session = _get_session(session_id)
    return _respond(session, session.controller.activate_puzzle(request.puzzle_id))


@router.post("/{session_id}/back", response_model=ActionResponse)
async def back(session_id: str):
    """Leave the active puzzle"""
    session = _get_session(session_id)
    return _respond(session, session.controller.back())


@router.post("/{session_id}/key", response_model=ActionResponse)
async def key(session_id: str, request: KeyRequest):
    session = _get_session(session_id)
    return _respond(session, session.controller.handle_key(request.key))


@router.post("/{session_id}/move", response_model=ActionResponse)
async def move(session_id: str, request: MoveRequest):
    session = _get_session(session_id)
    return _respond(
        session, session.controller.move_player(request.forward, request.strafe)
    )


@router.post("/{session_id}/look", response_model=ActionResponse)
async def look(session_id: str, request: LookRequest):
    session = _get_session(session_id)
    return _respond(session, session.controller.turn_player(request.dx, request.dy))


@router.post("/{session_id}/advance")
async def advance(session_id: str, request: AdvanceRequest):
    """Move the session clock (for clients that drive time themselves)"""
    session = _get_session(session_id)
    if request.seconds < 0:
        raise HTTPException(status_code=422, detail="seconds must not be negative")
    fired = session.advance(request.seconds)
    return {"fired": fired, "state": session.get_snapshot()}


@router.post("/{session_id}/connection/select", response_model=ActionResponse)
async def connection_select(session_id: str, request: NodeRequest):
    session = _get_session(session_id)
    return _respond(session, session.controller.select_or_connect(request.node_id))


@router.post("/{session_id}/connection/remove", response_model=ActionResponse)
async def connection_remove(session_id: str, request: EdgeRequest):
    session = _get_session(session_id)
    return _respond(session, session.controller.remove_edge(request.index))


@router.post("/{session_id}/pair-match/flip", response_model=ActionResponse)
async def pair_match_flip(session_id: str, request: CardRequest):
    session = _get_session(session_id)
    return _respond(session, session.controller.flip_card(request.index))


@router.post("/{session_id}/placement/release", response_model=ActionResponse)
async def placement_release(session_id: str, request: ReleaseRequest):
    session = _get_session(session_id)
    return _respond(
        session,
        session.controller.release_piece(request.piece_id, request.position),
    )
