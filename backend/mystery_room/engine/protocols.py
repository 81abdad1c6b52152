"""
Protocol definitions for the puzzle progression engine.

Solvers and the room controller only know each other through these
interfaces, which keeps the call graph one-directional:

Component Flow:
    Player Input -> RoomController (activate / route interaction)
                          |
                          v
                    PuzzleSolver (select_or_connect / flip_card / release_piece)
                          |
                          v  ProgressEvent
                    ProgressSink (RoomController.ingest)
                          |
                          v
                    FactListener (presentation layer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mystery_room.models.event import ProgressEvent, PuzzleType
    from mystery_room.models.state import SolverView
    from mystery_room.models.validation import ActionResult


@runtime_checkable
class ProgressSink(Protocol):
    """Receives progress events emitted by solvers."""

    def __call__(self, event: "ProgressEvent") -> "ActionResult":
        """Ingest a progress event.

        Args:
            event: The solver's report

        Returns:
            ActionResult telling whether the event was merged
        """
        ...


@runtime_checkable
class FactListener(Protocol):
    """Presentation-layer subscriber for the global fact set."""

    def __call__(self, facts: list[str]) -> None:
        ...


@runtime_checkable
class PuzzleSolver(Protocol):
    """Common surface of the three solvers.

    Solvers own their puzzle state, emit ProgressEvents when their
    solved-count changes and expose a read-only view for rendering.
    shutdown() must synchronously drop pending state so that a deferred
    transition firing afterwards has nothing to act on.
    """

    puzzle_type: "PuzzleType"

    @property
    def solved_count(self) -> int:
        ...

    @property
    def total_steps(self) -> int:
        ...

    @property
    def is_solved(self) -> bool:
        ...

    @property
    def alive(self) -> bool:
        ...

    def revealed_facts(self) -> list[str]:
        ...

    def shutdown(self) -> None:
        ...

    def view(self) -> "SolverView":
        ...

    def resume(self, session_token: int | None) -> None:
        ...
