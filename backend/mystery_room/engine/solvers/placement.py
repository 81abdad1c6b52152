"""
Placement puzzle solver - drag pieces onto their targets.

A release snaps the piece when the planar (x, y) distance to its target is
below the snap threshold. Placement is permanent.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from pydantic import BaseModel

from mystery_room.engine.notices import NoticeSlot
from mystery_room.engine.solvers.base import SolverBase, percent
from mystery_room.models.event import PuzzleType, RejectionCode
from mystery_room.models.room import Vector3
from mystery_room.models.state import NoticeKind, PieceView, PlacementView
from mystery_room.models.validation import (
    ActionResult,
    accepted_result,
    rejected_result,
)

if TYPE_CHECKING:
    from mystery_room.config import RoomSettings
    from mystery_room.engine.protocols import ProgressSink
    from mystery_room.engine.scheduler import DeferredScheduler
    from mystery_room.models.room import Puzzle

logger = logging.getLogger(__name__)


class Piece(BaseModel):
    id: int
    shape: str
    color: str
    current_position: Vector3
    target_position: Vector3
    placed: bool = False


def planar_distance(a: Vector3, b: Vector3) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


class PlacementSolver(SolverBase):
    """State machine for the placement puzzle.

    Piece ids are their positions in the layout (0-based).
    """

    puzzle_type = PuzzleType.PLACEMENT

    def __init__(
        self,
        puzzle: "Puzzle",
        scheduler: "DeferredScheduler",
        settings: "RoomSettings",
        sink: "ProgressSink | None" = None,
        session_token: int | None = None,
        seed: int | None = None,
    ):
        # Layout is deterministic; seed is accepted like every registered solver
        super().__init__(puzzle, scheduler, settings, sink, session_token)
        layout = puzzle.placement_layout()
        self.snap_threshold = (
            layout.snap_threshold
            if layout.snap_threshold is not None
            else settings.snap_threshold
        )
        self.pieces = [
            Piece(
                id=i,
                shape=definition.shape,
                color=definition.color,
                current_position=definition.start,
                target_position=definition.target,
            )
            for i, definition in enumerate(layout.pieces)
        ]
        self.celebration = NoticeSlot(
            scheduler, owner=f"{self.puzzle_type.value}:{puzzle.id}"
        )

    @property
    def placed_count(self) -> int:
        return sum(1 for piece in self.pieces if piece.placed)

    @property
    def total_pieces(self) -> int:
        return len(self.pieces)

    @property
    def solved_count(self) -> int:
        return self.placed_count

    @property
    def total_steps(self) -> int:
        return self.total_pieces

    def release_piece(self, piece_id: int, position: Vector3) -> ActionResult:
        """Drop a piece at a position.

        Args:
            piece_id: Piece being released
            position: Where it was dropped

        Returns:
            ActionResult; context["placed"] tells whether the piece snapped.
            Releasing an already placed piece is accepted and changes nothing.
        """
        inactive = self._inactive()
        if inactive:
            return inactive

        if not 0 <= piece_id < len(self.pieces):
            return rejected_result(
                RejectionCode.UNKNOWN_PIECE,
                f"There is no piece #{piece_id}.",
                piece_id=piece_id,
            )

        piece = self.pieces[piece_id]
        if piece.placed:
            return accepted_result(piece_id=piece_id, placed=True, already_placed=True)

        distance = planar_distance(position, piece.target_position)
        if distance >= self.snap_threshold:
            piece.current_position = tuple(position)
            return accepted_result(
                piece_id=piece_id, placed=False, distance=round(distance, 3)
            )

        piece.placed = True
        piece.current_position = piece.target_position
        logger.info(
            f"Placement {self.puzzle.id}: {piece.shape} placed "
            f"({self.placed_count}/{self.total_pieces})"
        )
        message = "All pieces placed!" if self.is_solved else f"{piece.shape.title()} placed!"
        self.celebration.post(
            message,
            NoticeKind.CELEBRATION,
            self.settings.celebration_ttl,
            subject=piece_id,
        )
        self._report_if_changed()
        return accepted_result(
            piece_id=piece_id,
            placed=True,
            progress_percent=self.progress_percent,
            solved=self.is_solved,
        )

    def _drop_pending(self) -> None:
        self.celebration.clear()

    def view(self) -> PlacementView:
        return PlacementView(
            pieces=[
                PieceView(
                    id=piece.id,
                    shape=piece.shape,
                    color=piece.color,
                    current_position=piece.current_position,
                    target_position=piece.target_position,
                    placed=piece.placed,
                )
                for piece in self.pieces
            ],
            placed_count=self.placed_count,
            total_pieces=self.total_pieces,
            progress_percent=percent(self.placed_count, self.total_pieces),
            solved=self.is_solved,
            celebration=self.celebration.current,
        )
