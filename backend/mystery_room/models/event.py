"""
Event models for the puzzle progression engine.

Solvers never call back into the room controller directly. Whenever a
solver's solved-count changes it emits a ProgressEvent into the sink it
was constructed with; the controller validates the event and merges it
into the progress records.

Key concepts:
    - PuzzleType: Closed enumeration of the puzzle variants
    - ProgressEvent: One-directional solver -> controller report
    - RejectionCode: Why an action or event was refused

Example:
    >>> event = ProgressEvent(
    ...     facts=["I enjoy combining design thinking with technical implementation"],
    ...     puzzle_type=PuzzleType.PAIR_MATCH,
    ...     puzzle_id=3,
    ... )
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class PuzzleType(str, Enum):
    """The three puzzle variants hosted by a room.

    Attributes:
        CONNECTION: Build a directed path between nodes
        PAIR_MATCH: Memory-matching over a shuffled deck
        PLACEMENT: Drag pieces onto their targets
    """

    CONNECTION = "connection"
    PAIR_MATCH = "pair_match"
    PLACEMENT = "placement"


# Tags used by the first version of the exhibit
LEGACY_TYPE_TAGS: dict[str, PuzzleType] = {
    "logic": PuzzleType.CONNECTION,
    "memory": PuzzleType.PAIR_MATCH,
    "shape": PuzzleType.PLACEMENT,
    "pair-match": PuzzleType.PAIR_MATCH,
}


def parse_puzzle_type(tag: "PuzzleType | str | None") -> PuzzleType | None:
    """Resolve a puzzle type tag to the closed enumeration.

    Args:
        tag: An enum member, a canonical tag, a legacy tag, or None

    Returns:
        The matching PuzzleType, or None if the tag is absent or unrecognized

    Example:
        >>> parse_puzzle_type("memory")
        <PuzzleType.PAIR_MATCH: 'pair_match'>
        >>> parse_puzzle_type("riddle") is None
        True
    """
    if tag is None:
        return None
    if isinstance(tag, PuzzleType):
        return tag
    if not isinstance(tag, str):
        return None

    normalized = tag.strip().lower()
    if normalized in LEGACY_TYPE_TAGS:
        return LEGACY_TYPE_TAGS[normalized]
    try:
        return PuzzleType(normalized)
    except ValueError:
        return None


class ProgressEvent(BaseModel):
    """Progress report emitted by a solver when its solved-count changes.

    Attributes:
        facts: Revealed facts, always a prefix of the puzzle's fact list
        puzzle_type: Type tag of the emitting solver
        puzzle_id: Puzzle the solver was created for
        session_token: Token of the session the solver belongs to
    """

    facts: list[str] = Field(default_factory=list)
    puzzle_type: PuzzleType
    puzzle_id: int
    session_token: int | None = None


class RejectionCode(str, Enum):
    """Rejection codes for refused actions and dropped events.

    These codes are machine-readable; none of them is surfaced to the
    player except through the presentation layer's own choices.
    """

    # Room controller
    PUZZLE_LOCKED = "puzzle_locked"  # Another puzzle is locked active
    ACTIVATION_PENDING = "activation_pending"  # Camera still settling
    UNKNOWN_PUZZLE = "unknown_puzzle"  # No station with that id
    NOT_EXPLORING = "not_exploring"  # Movement while a puzzle is active
    NO_ACTIVE_PUZZLE = "no_active_puzzle"  # Nothing to deactivate or route to
    WRONG_PUZZLE_TYPE = "wrong_puzzle_type"  # Interaction for another solver

    # Progress protocol
    TYPE_TAG_MISSING = "type_tag_missing"
    TYPE_TAG_UNRECOGNIZED = "type_tag_unrecognized"
    TYPE_MISMATCH = "type_mismatch"  # Differs from the session's initial type
    STALE_SESSION = "stale_session"  # Event from an earlier session
    FACTS_MISMATCH = "facts_mismatch"  # Not a prefix of the puzzle's facts

    # Solvers
    SOLVER_INACTIVE = "solver_inactive"  # Solver was shut down
    UNKNOWN_NODE = "unknown_node"
    DUPLICATE_EDGE = "duplicate_edge"
    NO_SUCH_EDGE = "no_such_edge"
    CARD_OUT_OF_RANGE = "card_out_of_range"
    CARD_MATCHED = "card_matched"
    CARD_FLIPPED = "card_flipped"
    RESOLUTION_LOCKED = "resolution_locked"  # Pair-match lock window
    UNKNOWN_PIECE = "unknown_piece"
