"""
Puzzle solvers - one state machine per puzzle type
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mystery_room.engine.solvers.base import SolverBase, percent
from mystery_room.engine.solvers.connection import ConnectionSolver
from mystery_room.engine.solvers.pair_match import PairMatchSolver
from mystery_room.engine.solvers.placement import PlacementSolver
from mystery_room.models.event import PuzzleType

if TYPE_CHECKING:
    from mystery_room.config import RoomSettings
    from mystery_room.engine.protocols import ProgressSink, PuzzleSolver
    from mystery_room.engine.scheduler import DeferredScheduler
    from mystery_room.models.room import Puzzle

SOLVER_CLASSES: dict[PuzzleType, type[SolverBase]] = {
    PuzzleType.CONNECTION: ConnectionSolver,
    PuzzleType.PAIR_MATCH: PairMatchSolver,
    PuzzleType.PLACEMENT: PlacementSolver,
}


def create_solver(
    puzzle: "Puzzle",
    scheduler: "DeferredScheduler",
    settings: "RoomSettings",
    sink: "ProgressSink | None" = None,
    session_token: int | None = None,
    seed: int | None = None,
) -> "PuzzleSolver | None":
    """Build the solver for a puzzle, or None if its type is unknown.

    Args:
        puzzle: Static puzzle configuration
        scheduler: Scheduler for deferred transitions
        settings: Engine settings
        sink: Receiver of progress events
        session_token: Token of the owning session
        seed: Shuffle seed, used by solvers with random setup
    """
    puzzle_type = puzzle.puzzle_type
    if puzzle_type is None:
        return None
    return SOLVER_CLASSES[puzzle_type](
        puzzle, scheduler, settings, sink, session_token, seed=seed
    )


__all__ = [
    "ConnectionSolver",
    "PairMatchSolver",
    "PlacementSolver",
    "SOLVER_CLASSES",
    "SolverBase",
    "create_solver",
    "percent",
]
