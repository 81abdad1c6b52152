"""Mystery room models."""

from mystery_room.models.event import (
    ProgressEvent,
    PuzzleType,
    RejectionCode,
    parse_puzzle_type,
)
from mystery_room.models.room import (
    LookDirection,
    Puzzle,
    Room,
    RoomData,
)
from mystery_room.models.state import (
    ActivePuzzleSession,
    PlayerPose,
    PuzzleProgressRecord,
    RoomSnapshot,
    RoomState,
    TransientNotice,
)
from mystery_room.models.validation import ActionResult

__all__ = [
    # Event
    "ProgressEvent",
    "PuzzleType",
    "RejectionCode",
    "parse_puzzle_type",
    # Room
    "LookDirection",
    "Puzzle",
    "Room",
    "RoomData",
    # State
    "ActivePuzzleSession",
    "PlayerPose",
    "PuzzleProgressRecord",
    "RoomSnapshot",
    "RoomState",
    "TransientNotice",
    # Validation
    "ActionResult",
]
