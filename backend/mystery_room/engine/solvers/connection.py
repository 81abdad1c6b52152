"""
Connection puzzle solver.

The player builds a path by clicking nodes: the first click selects a
node, a second click on another node draws an edge from the selected
node to it. Edges are stored once per unordered pair but graded by
direction against the fixed correct sequence.

Grading after every edge creation or removal:
    - progress = correct edges / correct edges required
    - solved   = every correct edge present AND an edge leaves the start
                 node AND an edge reaches the end node
    - warning  = "Your path must connect from Start to End" when the start
                 or end is not reached, otherwise "Some connections aren't
                 correct" while any drawn edge is incorrect

Extra incorrect edges never block the solved state, but keep the warning
up until they are removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mystery_room.engine.notices import NoticeSlot
from mystery_room.engine.solvers.base import SolverBase, percent
from mystery_room.models.event import PuzzleType, RejectionCode
from mystery_room.models.state import (
    ConnectionView,
    EdgeView,
    NodeView,
    NoticeKind,
)
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

MUST_CONNECT_START_TO_END = "Your path must connect from Start to End"
INCORRECT_CONNECTIONS = "Some connections aren't correct"


@dataclass(frozen=True)
class Edge:
    """A drawn edge; direction matters for grading only."""

    from_node: int
    to_node: int

    def same_pair(self, other: "Edge") -> bool:
        return {self.from_node, self.to_node} == {other.from_node, other.to_node}


class ConnectionSolver(SolverBase):
    """State machine for the connection puzzle.

    Attributes:
        edges: Drawn edges in creation order
        selected_node: Currently selected node id, if any
        warning: Single warning slot (at most one message at a time)
        celebration: New-edge / solved celebration slot

    Example:
        >>> solver = ConnectionSolver(puzzle, scheduler, settings, sink)
        >>> solver.select_or_connect(1)   # select Start
        >>> solver.select_or_connect(2)   # draw 1 -> 2
        >>> solver.correct_edge_count
        1
    """

    puzzle_type = PuzzleType.CONNECTION

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
        layout = puzzle.connection_layout()
        self.layout = layout
        self._nodes = {node.id: node for node in layout.nodes}
        self._correct = {Edge(a, b) for a, b in layout.correct_sequence}

        self.edges: list[Edge] = []
        self.selected_node: int | None = None
        self._solved = False

        owner = f"{self.puzzle_type.value}:{puzzle.id}"
        self.warning = NoticeSlot(scheduler, owner=owner)
        self.celebration = NoticeSlot(scheduler, owner=owner)

    # -- grading ----------------------------------------------------------

    def is_correct(self, edge: Edge) -> bool:
        """Directed match against the correct sequence."""
        return edge in self._correct

    @property
    def correct_edge_count(self) -> int:
        return sum(1 for edge in self.edges if self.is_correct(edge))

    @property
    def total_correct_edges(self) -> int:
        return len(self._correct)

    @property
    def solved_count(self) -> int:
        return self.correct_edge_count

    @property
    def total_steps(self) -> int:
        return self.total_correct_edges

    @property
    def is_solved(self) -> bool:
        return self._solved

    def hints(self) -> list[tuple[int, int]]:
        """Correct edges not drawn yet, in sequence order."""
        drawn = set(self.edges)
        return [
            (a, b)
            for a, b in self.layout.correct_sequence
            if Edge(a, b) not in drawn
        ]

    def _evaluate(self) -> None:
        has_start = any(e.from_node == self.layout.start_node for e in self.edges)
        has_end = any(e.to_node == self.layout.end_node for e in self.edges)
        correct = self.correct_edge_count

        was_solved = self._solved
        self._solved = (
            correct == self.total_correct_edges and has_start and has_end
        )

        if self.edges and (not has_start or not has_end):
            self.warning.post(
                MUST_CONNECT_START_TO_END, NoticeKind.WARNING, self.settings.warning_ttl
            )
        elif self.edges and correct < len(self.edges):
            self.warning.post(
                INCORRECT_CONNECTIONS, NoticeKind.WARNING, self.settings.warning_ttl
            )

        if self._solved and not was_solved:
            logger.info(f"Connection puzzle {self.puzzle.id} solved")
            self.celebration.post(
                "Path complete!", NoticeKind.CELEBRATION, self.settings.celebration_ttl
            )

        self._report_if_changed()

    # -- player actions ---------------------------------------------------

    def select_or_connect(self, node_id: int) -> ActionResult:
        """Handle a click on a node.

        Args:
            node_id: The clicked node

        Returns:
            ActionResult; context["action"] is "selected", "deselected"
            or "connected"
        """
        inactive = self._inactive()
        if inactive:
            return inactive

        if node_id not in self._nodes:
            return rejected_result(
                RejectionCode.UNKNOWN_NODE,
                f"There is no node {node_id}.",
                node_id=node_id,
            )

        if self.selected_node is None:
            self.warning.clear()
            self.selected_node = node_id
            return accepted_result(action="selected", node_id=node_id)

        if self.selected_node == node_id:
            self.warning.clear()
            self.selected_node = None
            return accepted_result(action="deselected", node_id=node_id)

        edge = Edge(self.selected_node, node_id)
        if any(edge.same_pair(existing) for existing in self.edges):
            # Second click always ends the selection; edges and warning stay
            self.selected_node = None
            return rejected_result(
                RejectionCode.DUPLICATE_EDGE,
                "Those nodes are already connected.",
                from_node=edge.from_node,
                to_node=edge.to_node,
            )

        self.warning.clear()
        self.selected_node = None
        self.edges.append(edge)
        edge_index = len(self.edges) - 1
        self.celebration.post(
            "Connected!",
            NoticeKind.CELEBRATION,
            self.settings.celebration_ttl,
            subject=edge_index,
        )
        self._evaluate()
        return accepted_result(
            action="connected",
            edge_index=edge_index,
            correct=self.is_correct(edge),
            progress_percent=self.progress_percent,
            solved=self._solved,
        )

    def remove_edge(self, index: int) -> ActionResult:
        """Delete a drawn edge and re-grade (progress may decrease).

        Args:
            index: Position of the edge in creation order

        Returns:
            ActionResult with the removed edge in context
        """
        inactive = self._inactive()
        if inactive:
            return inactive

        if not 0 <= index < len(self.edges):
            return rejected_result(
                RejectionCode.NO_SUCH_EDGE,
                f"There is no connection #{index}.",
                index=index,
            )

        self.warning.clear()
        edge = self.edges.pop(index)
        self._evaluate()
        return accepted_result(
            action="removed",
            from_node=edge.from_node,
            to_node=edge.to_node,
            progress_percent=self.progress_percent,
            solved=self._solved,
        )

    def _drop_pending(self) -> None:
        self.selected_node = None
        self.warning.clear()
        self.celebration.clear()

    # -- rendering --------------------------------------------------------

    def view(self) -> ConnectionView:
        connected = {e.from_node for e in self.edges} | {e.to_node for e in self.edges}
        return ConnectionView(
            nodes=[
                NodeView(
                    id=node.id,
                    label=node.label,
                    fixed=node.fixed,
                    position=node.position,
                    connected=node.id in connected,
                )
                for node in self.layout.nodes
            ],
            edges=[
                EdgeView(
                    from_node=e.from_node,
                    to_node=e.to_node,
                    correct=self.is_correct(e),
                )
                for e in self.edges
            ],
            selected_node=self.selected_node,
            hints=self.hints(),
            correct_edge_count=self.correct_edge_count,
            total_correct_edges=self.total_correct_edges,
            progress_percent=percent(self.correct_edge_count, self.total_correct_edges),
            solved=self._solved,
            warning=self.warning.current,
            celebration=self.celebration.current,
        )
