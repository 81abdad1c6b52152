"""
Session state models - Pydantic models for room session state and the
read-only snapshots handed to the presentation layer
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from mystery_room.models.event import PuzzleType
from mystery_room.models.room import LookDirection, Vector3


class RoomState(str, Enum):
    """Top-level room controller state"""

    EXPLORING = "exploring"        # No active puzzle, movement enabled
    PUZZLE_ACTIVE = "puzzle_active"  # Movement disabled, one solver receives input


class NoticeKind(str, Enum):
    """Category of a transient message"""

    WARNING = "warning"
    CELEBRATION = "celebration"
    INFO = "info"


class TransientNotice(BaseModel):
    """Short-lived message shown by the presentation layer"""
    message: str
    kind: NoticeKind = NoticeKind.INFO
    issued_at: float
    expires_at: float
    subject: Any = None  # What the notice is about (edge index, card pair...)


class PlayerPose(BaseModel):
    """Player position and look direction"""
    position: Vector3 = (0.0, 0.0, 0.0)
    look: LookDirection = Field(default_factory=LookDirection)


class PuzzleProgressRecord(BaseModel):
    """Revealed facts and completion for one puzzle"""
    puzzle_id: int
    facts: list[str] = Field(default_factory=list)
    progress_percent: int = 0


class ActivePuzzleSession(BaseModel):
    """The single puzzle currently being played"""
    puzzle_id: int
    initial_type: PuzzleType | None  # Captured once at activation; None for unknown types
    locked: bool = True
    session_token: int


class StationView(BaseModel):
    """Puzzle station as rendered in the room"""
    id: int
    title: str
    type: str
    color: str
    position: Vector3
    progress_percent: int = 0
    completed: bool = False


# =============================================================================
# Solver views
# =============================================================================


class NodeView(BaseModel):
    id: int
    label: str
    fixed: bool
    position: Vector3
    connected: bool = False


class EdgeView(BaseModel):
    from_node: int
    to_node: int
    correct: bool


class ConnectionView(BaseModel):
    """Render state of a connection solver"""
    puzzle_type: PuzzleType = PuzzleType.CONNECTION
    nodes: list[NodeView]
    edges: list[EdgeView]
    selected_node: int | None = None
    hints: list[tuple[int, int]] = Field(default_factory=list)
    correct_edge_count: int = 0
    total_correct_edges: int = 0
    progress_percent: int = 0
    solved: bool = False
    warning: TransientNotice | None = None
    celebration: TransientNotice | None = None


class CardView(BaseModel):
    index: int
    symbol: str | None  # Hidden while face-down
    label: str | None
    matched: bool
    face_up: bool


class PairMatchView(BaseModel):
    """Render state of a pair-match solver"""
    puzzle_type: PuzzleType = PuzzleType.PAIR_MATCH
    cards: list[CardView]
    flipped: list[int] = Field(default_factory=list)
    locked_for_resolution: bool = False
    matched_pair_count: int = 0
    total_pair_count: int = 0
    progress_percent: int = 0
    solved: bool = False
    celebration: TransientNotice | None = None


class PieceView(BaseModel):
    id: int
    shape: str
    color: str
    current_position: Vector3
    target_position: Vector3
    placed: bool


class PlacementView(BaseModel):
    """Render state of a placement solver"""
    puzzle_type: PuzzleType = PuzzleType.PLACEMENT
    pieces: list[PieceView]
    placed_count: int = 0
    total_pieces: int = 0
    progress_percent: int = 0
    solved: bool = False
    celebration: TransientNotice | None = None


SolverView = ConnectionView | PairMatchView | PlacementView


class RoomSnapshot(BaseModel):
    """Read-only render input polled by the presentation layer once per frame"""
    state: RoomState
    activation_pending: bool = False
    pose: PlayerPose
    session: ActivePuzzleSession | None = None
    progress: dict[int, PuzzleProgressRecord] = Field(default_factory=dict)
    completed: list[int] = Field(default_factory=list)
    global_facts: list[str] = Field(default_factory=list)
    stations: list[StationView] = Field(default_factory=list)
    active_puzzle: SolverView | None = None
    fallback_notice: str | None = None
    all_completed: bool = False
    clock: float = 0.0
