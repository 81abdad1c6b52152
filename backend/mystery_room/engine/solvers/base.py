"""
Shared solver machinery: progress reporting, liveness and deferred
transitions guarded by an epoch token.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable

from mystery_room.models.event import ProgressEvent, PuzzleType, RejectionCode
from mystery_room.models.validation import ActionResult, rejected_result

if TYPE_CHECKING:
    from mystery_room.config import RoomSettings
    from mystery_room.engine.protocols import ProgressSink
    from mystery_room.engine.scheduler import DeferredScheduler
    from mystery_room.models.room import Puzzle
    from mystery_room.models.state import SolverView

logger = logging.getLogger(__name__)


def percent(done: int, total: int) -> int:
    """Integer percentage clamped to 0..100 (0 when total is 0).

    Halves round up, so 1 of 8 is 13.
    """
    if total <= 0:
        return 0
    return max(0, min(100, math.floor(done / total * 100 + 0.5)))


class SolverBase:
    """Base class for the three puzzle solvers.

    Subclasses implement solved_count, total_steps and view(). They call
    _report_if_changed() after every mutation; an event is emitted only
    when the solved-count differs from the last reported one.

    Deferred work goes through _defer(), which wraps the callback in a
    liveness check: the callback runs only if the solver is still alive
    and no reset happened since it was scheduled.

    Attributes:
        puzzle: Static puzzle configuration
        puzzle_type: Type of this solver
        session_token: Token of the room session that created the solver
    """

    puzzle_type: PuzzleType

    def __init__(
        self,
        puzzle: "Puzzle",
        scheduler: "DeferredScheduler",
        settings: "RoomSettings",
        sink: "ProgressSink | None" = None,
        session_token: int | None = None,
    ):
        self.puzzle = puzzle
        self.scheduler = scheduler
        self.settings = settings
        self.session_token = session_token
        self._sink = sink
        self._alive = True
        self._epoch = 0
        self._last_reported = 0

    # -- state ------------------------------------------------------------

    @property
    def solved_count(self) -> int:
        raise NotImplementedError

    @property
    def total_steps(self) -> int:
        raise NotImplementedError

    @property
    def is_solved(self) -> bool:
        return self.total_steps > 0 and self.solved_count == self.total_steps

    @property
    def progress_percent(self) -> int:
        return percent(self.solved_count, self.total_steps)

    @property
    def alive(self) -> bool:
        return self._alive

    def revealed_facts(self) -> list[str]:
        """Prefix of the puzzle's facts, one per solved step."""
        return list(self.puzzle.facts[: self.solved_count])

    def view(self) -> "SolverView":
        raise NotImplementedError

    # -- lifecycle --------------------------------------------------------

    def shutdown(self) -> None:
        """Stop accepting input and invalidate every pending transition."""
        self._alive = False
        self._epoch += 1
        self._drop_pending()
        logger.debug(f"{self.puzzle_type.value} solver for puzzle {self.puzzle.id} shut down")

    def resume(self, session_token: int | None) -> None:
        """Accept input again under a new session.

        Board state (edges, matched cards, placed pieces) survives a
        shutdown; transitions scheduled before it stay invalid.
        """
        self._alive = True
        self.session_token = session_token
        logger.debug(f"{self.puzzle_type.value} solver for puzzle {self.puzzle.id} resumed")

    def _drop_pending(self) -> None:
        """Clear transient in-flight state. Overridden by solvers that have some."""

    # -- helpers ----------------------------------------------------------

    def _inactive(self) -> ActionResult | None:
        if self._alive:
            return None
        return rejected_result(
            RejectionCode.SOLVER_INACTIVE,
            "This puzzle is no longer active.",
        )

    def _defer(self, delay: float, action: Callable[[], None], label: str) -> None:
        epoch = self._epoch

        def guarded() -> None:
            if not self._alive or self._epoch != epoch:
                logger.debug(
                    f"Dropping stale {label} for puzzle {self.puzzle.id} (epoch {epoch} != {self._epoch})"
                )
                return
            action()

        self.scheduler.schedule(
            delay,
            guarded,
            owner=f"{self.puzzle_type.value}:{self.puzzle.id}",
            label=label,
        )

    def _report_if_changed(self) -> None:
        count = self.solved_count
        if count == self._last_reported:
            return
        self._last_reported = count
        if self._sink is None:
            return
        self._sink(
            ProgressEvent(
                facts=self.revealed_facts(),
                puzzle_type=self.puzzle_type,
                puzzle_id=self.puzzle.id,
                session_token=self.session_token,
            )
        )
