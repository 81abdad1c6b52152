"""
Room controller - arbitrates the single active puzzle and aggregates facts.

States:
    EXPLORING      no active puzzle, the player can walk and look around
    PUZZLE_ACTIVE  movement disabled, one solver receives input

Activation is two-step: activate_puzzle() saves the pose and moves the
player in front of the station, then after activation_delay the puzzle is
locked and an ActivePuzzleSession is created. Between the two steps the
activation is "pending" and can still be aborted with back().

Progress flows one way. Each solver is built with self.ingest as its
sink; the controller checks the session token and the type tag against
the session's initial type before touching any record.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from mystery_room.config import RoomSettings
from mystery_room.engine.player import approach_pose, turn, walk
from mystery_room.engine.scheduler import DeferredScheduler
from mystery_room.engine.solvers import (
    ConnectionSolver,
    create_solver,
    percent,
)
from mystery_room.models.event import (
    ProgressEvent,
    PuzzleType,
    RejectionCode,
    parse_puzzle_type,
)
from mystery_room.models.state import (
    ActivePuzzleSession,
    PlayerPose,
    PuzzleProgressRecord,
    RoomSnapshot,
    RoomState,
    StationView,
)
from mystery_room.models.validation import (
    ActionResult,
    accepted_result,
    rejected_result,
)

if TYPE_CHECKING:
    from mystery_room.engine.protocols import FactListener, PuzzleSolver
    from mystery_room.models.room import Puzzle, RoomData, Vector3

logger = logging.getLogger(__name__)

CANCEL_KEY = "Escape"


class RoomController:
    """Owns the player pose, the active-puzzle slot and the progress records.

    Example:
        >>> controller = RoomController(room_data)
        >>> _ = controller.activate_puzzle(2)
        >>> _ = controller.scheduler.advance(0.3)
        >>> controller.state
        <RoomState.PUZZLE_ACTIVE: 'puzzle_active'>
        >>> _ = controller.select_or_connect(1)
        >>> _ = controller.select_or_connect(2)
        >>> controller.progress[2].progress_percent
        20
    """

    def __init__(
        self,
        room_data: "RoomData",
        scheduler: DeferredScheduler | None = None,
        settings: RoomSettings | None = None,
        seed: int | None = None,
    ):
        ids = [puzzle.id for puzzle in room_data.puzzles]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate puzzle ids in room '{room_data.room.name}': {ids}")

        self.room_data = room_data
        self.scheduler = scheduler or DeferredScheduler()
        self.settings = settings or RoomSettings()
        self.seed = seed

        player = room_data.room.player
        self.pose = PlayerPose(
            position=player.start_position, look=player.look.model_copy()
        )
        self.state = RoomState.EXPLORING
        self.session: ActivePuzzleSession | None = None
        self.solver: "PuzzleSolver | None" = None
        self.fallback_notice: str | None = None

        self.progress: dict[int, PuzzleProgressRecord] = {}
        self.completed: set[int] = set()
        self.global_facts: list[str] = []

        self._solvers: dict[int, "PuzzleSolver"] = {}
        self._saved_pose: PlayerPose | None = None
        self._pending_puzzle_id: int | None = None
        self._token = 0
        self._listeners: list["FactListener"] = []

    # =========================================================================
    # State queries
    # =========================================================================

    @property
    def activation_pending(self) -> bool:
        return self._pending_puzzle_id is not None

    @property
    def all_completed(self) -> bool:
        return bool(self.room_data.puzzles) and self.completed >= set(
            self.room_data.puzzle_ids()
        )

    def hints(self) -> list[tuple[int, int]]:
        """Connection hints of the active solver (empty for other types)."""
        if isinstance(self.solver, ConnectionSolver) and self.solver.alive:
            return self.solver.hints()
        return []

    def subscribe(self, listener: "FactListener") -> Callable[[], None]:
        """Register a listener for the global fact set.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Activation / deactivation
    # =========================================================================

    def activate_puzzle(self, puzzle_id: int) -> ActionResult:
        """Start activating a puzzle station.

        The player is moved to the approach pose right away; the puzzle
        locks once activation_delay has elapsed on the scheduler.

        Args:
            puzzle_id: Station that was clicked

        Returns:
            ActionResult with the approach pose in context
        """
        if self.state == RoomState.PUZZLE_ACTIVE:
            logger.warning(
                f"Activation of puzzle {puzzle_id} refused: puzzle "
                f"{self.session.puzzle_id if self.session else '?'} is active"
            )
            return rejected_result(
                RejectionCode.PUZZLE_LOCKED,
                "Another puzzle is already active.",
                puzzle_id=puzzle_id,
            )
        if self.activation_pending:
            logger.warning(
                f"Activation of puzzle {puzzle_id} refused: puzzle "
                f"{self._pending_puzzle_id} is still activating"
            )
            return rejected_result(
                RejectionCode.ACTIVATION_PENDING,
                "A puzzle is already being activated.",
                puzzle_id=puzzle_id,
            )

        puzzle = self.room_data.get_puzzle(puzzle_id)
        if puzzle is None:
            logger.warning(f"Activation refused: unknown puzzle {puzzle_id}")
            return rejected_result(
                RejectionCode.UNKNOWN_PUZZLE,
                f"There is no puzzle {puzzle_id}.",
                puzzle_id=puzzle_id,
            )

        self._saved_pose = self.pose.model_copy(deep=True)
        self.pose = approach_pose(self.pose, puzzle.position, self.settings)
        self._token += 1
        token = self._token
        self._pending_puzzle_id = puzzle_id

        self.scheduler.schedule(
            self.settings.activation_delay,
            lambda: self._lock(puzzle_id, token),
            owner="room",
            label=f"activate-{puzzle_id}",
        )
        logger.info(f"Activating puzzle {puzzle_id} ({puzzle.title})")
        return accepted_result(
            puzzle_id=puzzle_id,
            pose=self.pose.model_dump(),
            lock_in=self.settings.activation_delay,
        )

    def _lock(self, puzzle_id: int, token: int) -> None:
        if token != self._token or self._pending_puzzle_id != puzzle_id:
            logger.debug(f"Dropping stale activation of puzzle {puzzle_id} (token {token})")
            return

        puzzle = self.room_data.get_puzzle(puzzle_id)
        self._pending_puzzle_id = None
        initial_type = puzzle.puzzle_type

        self.session = ActivePuzzleSession(
            puzzle_id=puzzle_id,
            initial_type=initial_type,
            locked=True,
            session_token=token,
        )
        self.state = RoomState.PUZZLE_ACTIVE

        if initial_type is None:
            self.solver = None
            self.fallback_notice = f"Unknown puzzle type: {puzzle.type}"
            logger.error(f"Puzzle {puzzle_id} has unknown type '{puzzle.type}'")
            return

        self.fallback_notice = None
        self.solver = self._solver_for(puzzle, token)
        logger.info(f"Puzzle {puzzle_id} active ({initial_type.value})")

    def _solver_for(self, puzzle: "Puzzle", token: int) -> "PuzzleSolver":
        solver = self._solvers.get(puzzle.id)
        if solver is None:
            solver = create_solver(
                puzzle,
                self.scheduler,
                self.settings,
                sink=self.ingest,
                session_token=token,
                seed=self.seed,
            )
            self._solvers[puzzle.id] = solver
        else:
            solver.resume(token)
        return solver

    def deactivate(self) -> ActionResult:
        """Leave the active puzzle (or abort a pending activation).

        Restores the pose saved at activation exactly and shuts the solver
        down, which drops its in-flight flip/lock state.
        """
        if self.activation_pending:
            puzzle_id = self._pending_puzzle_id
            self._pending_puzzle_id = None
            self._token += 1
            self._restore_pose()
            logger.info(f"Activation of puzzle {puzzle_id} aborted")
            return accepted_result(puzzle_id=puzzle_id, aborted=True)

        if self.state != RoomState.PUZZLE_ACTIVE or self.session is None:
            return rejected_result(
                RejectionCode.NO_ACTIVE_PUZZLE,
                "No puzzle is active.",
            )

        puzzle_id = self.session.puzzle_id
        if self.solver is not None:
            self.solver.shutdown()
        self.solver = None
        self.session = None
        self.fallback_notice = None
        self.state = RoomState.EXPLORING
        self._token += 1
        self._restore_pose()
        logger.info(f"Puzzle {puzzle_id} deactivated")
        return accepted_result(puzzle_id=puzzle_id, aborted=False)

    back = deactivate

    def _restore_pose(self) -> None:
        if self._saved_pose is not None:
            self.pose = self._saved_pose.model_copy(deep=True)
        self._saved_pose = None

    def handle_key(self, key: str) -> ActionResult:
        """Keyboard input; only the cancellation key does anything."""
        if key == CANCEL_KEY:
            return self.deactivate()
        return accepted_result(key=key, handled=False)

    # =========================================================================
    # Movement
    # =========================================================================

    def _movement_blocked(self) -> ActionResult | None:
        if self.state != RoomState.EXPLORING:
            return rejected_result(
                RejectionCode.NOT_EXPLORING,
                "Movement is disabled while a puzzle is active.",
            )
        if self.activation_pending:
            return rejected_result(
                RejectionCode.ACTIVATION_PENDING,
                "Movement is disabled while a puzzle is being activated.",
            )
        return None

    def move_player(self, forward: float, strafe: float = 0.0) -> ActionResult:
        blocked = self._movement_blocked()
        if blocked:
            return blocked
        self.pose = walk(self.pose, forward, strafe, self.settings)
        return accepted_result(position=list(self.pose.position))

    def turn_player(self, dx: float, dy: float) -> ActionResult:
        blocked = self._movement_blocked()
        if blocked:
            return blocked
        self.pose = turn(self.pose, dx, dy, self.settings)
        return accepted_result(look=self.pose.look.model_dump())

    # =========================================================================
    # Progress
    # =========================================================================

    def ingest(self, event: ProgressEvent) -> ActionResult:
        """Sink handed to solvers; see report_progress()."""
        if self.session is not None and event.puzzle_id != self.session.puzzle_id:
            logger.warning(
                f"Dropping progress for puzzle {event.puzzle_id}: "
                f"puzzle {self.session.puzzle_id} is active"
            )
            return rejected_result(
                RejectionCode.STALE_SESSION,
                "Progress event for a puzzle that is not active.",
                puzzle_id=event.puzzle_id,
            )
        return self.report_progress(
            event.facts, event.puzzle_type, session_token=event.session_token
        )

    def report_progress(
        self,
        facts: list[str],
        type_tag: "PuzzleType | str | None",
        session_token: int | None = None,
    ) -> ActionResult:
        """Merge revealed facts of the active puzzle.

        Protocol violations are logged and dropped without touching any
        record: no active puzzle, a token from another session, a missing,
        unrecognized or mismatching type tag, or facts that are not a
        prefix of the puzzle's facts.

        Args:
            facts: Revealed facts so far
            type_tag: Type of the reporting solver (legacy tags accepted)
            session_token: Session the report belongs to, if known

        Returns:
            ActionResult with the new percentage in context
        """
        if self.state != RoomState.PUZZLE_ACTIVE or self.session is None:
            logger.warning("Dropping progress report: no puzzle is active")
            return rejected_result(
                RejectionCode.NO_ACTIVE_PUZZLE,
                "No puzzle is active.",
            )

        session = self.session
        if session_token is not None and session_token != session.session_token:
            logger.warning(
                f"Dropping progress report from session {session_token} "
                f"(active session is {session.session_token})"
            )
            return rejected_result(
                RejectionCode.STALE_SESSION,
                "Progress event from an earlier session.",
                session_token=session_token,
            )

        if type_tag is None or (isinstance(type_tag, str) and not type_tag.strip()):
            logger.warning(f"Dropping progress report for puzzle {session.puzzle_id}: no type tag")
            return rejected_result(
                RejectionCode.TYPE_TAG_MISSING,
                "Progress report has no puzzle type.",
            )

        puzzle_type = parse_puzzle_type(type_tag)
        if puzzle_type is None:
            logger.warning(f"Dropping progress report: unrecognized type tag {type_tag!r}")
            return rejected_result(
                RejectionCode.TYPE_TAG_UNRECOGNIZED,
                f"Unrecognized puzzle type {type_tag!r}.",
                type_tag=str(type_tag),
            )

        if puzzle_type != session.initial_type:
            expected = session.initial_type.value if session.initial_type else None
            logger.warning(
                f"Dropping progress report of type {puzzle_type.value}: "
                f"puzzle {session.puzzle_id} is {expected}"
            )
            return rejected_result(
                RejectionCode.TYPE_MISMATCH,
                "Progress report does not match the active puzzle type.",
                expected=expected,
                received=puzzle_type.value,
            )

        puzzle = self.room_data.get_puzzle(session.puzzle_id)
        facts = list(facts)
        if len(facts) > puzzle.total_facts or tuple(facts) != puzzle.facts[: len(facts)]:
            logger.error(
                f"Dropping progress report for puzzle {puzzle.id}: facts are not a "
                f"prefix of the puzzle's facts"
            )
            return rejected_result(
                RejectionCode.FACTS_MISMATCH,
                "Reported facts do not belong to the active puzzle.",
                puzzle_id=puzzle.id,
            )

        self._apply_progress(puzzle, facts)
        return accepted_result(
            puzzle_id=puzzle.id,
            progress_percent=self.progress[puzzle.id].progress_percent,
            completed=puzzle.id in self.completed,
        )

    def _apply_progress(self, puzzle: "Puzzle", facts: list[str]) -> None:
        record = PuzzleProgressRecord(
            puzzle_id=puzzle.id,
            facts=facts,
            progress_percent=percent(len(facts), puzzle.total_facts),
        )
        self.progress[puzzle.id] = record

        if len(facts) == puzzle.total_facts and puzzle.id not in self.completed:
            self.completed.add(puzzle.id)
            logger.info(f"Puzzle {puzzle.id} ({puzzle.title}) completed")

        self.global_facts = self._merge_facts(puzzle.id)
        logger.debug(
            f"Puzzle {puzzle.id} at {record.progress_percent}%, "
            f"{len(self.global_facts)} facts revealed"
        )

        for listener in list(self._listeners):
            listener(list(self.global_facts))

    def _merge_facts(self, updated_id: int) -> list[str]:
        ordered: list[str] = []
        for puzzle_id in sorted(self.progress):
            if puzzle_id != updated_id:
                ordered.extend(self.progress[puzzle_id].facts)
        ordered.extend(self.progress[updated_id].facts)
        return list(dict.fromkeys(ordered))

    # =========================================================================
    # Interaction routing
    # =========================================================================

    def _route(self, puzzle_type: PuzzleType) -> "PuzzleSolver | ActionResult":
        if self.state != RoomState.PUZZLE_ACTIVE or self.solver is None:
            return rejected_result(
                RejectionCode.NO_ACTIVE_PUZZLE,
                "No puzzle is active.",
            )
        if self.solver.puzzle_type != puzzle_type:
            logger.warning(
                f"Dropping {puzzle_type.value} interaction: active puzzle is "
                f"{self.solver.puzzle_type.value}"
            )
            return rejected_result(
                RejectionCode.WRONG_PUZZLE_TYPE,
                f"The active puzzle is not a {puzzle_type.value} puzzle.",
                active_type=self.solver.puzzle_type.value,
            )
        return self.solver

    def select_or_connect(self, node_id: int) -> ActionResult:
        solver = self._route(PuzzleType.CONNECTION)
        if isinstance(solver, ActionResult):
            return solver
        return solver.select_or_connect(node_id)

    def remove_edge(self, index: int) -> ActionResult:
        solver = self._route(PuzzleType.CONNECTION)
        if isinstance(solver, ActionResult):
            return solver
        return solver.remove_edge(index)

    def flip_card(self, index: int) -> ActionResult:
        solver = self._route(PuzzleType.PAIR_MATCH)
        if isinstance(solver, ActionResult):
            return solver
        return solver.flip_card(index)

    def release_piece(self, piece_id: int, position: "Vector3") -> ActionResult:
        solver = self._route(PuzzleType.PLACEMENT)
        if isinstance(solver, ActionResult):
            return solver
        return solver.release_piece(piece_id, position)

    # =========================================================================
    # Render input
    # =========================================================================

    def snapshot(self) -> RoomSnapshot:
        """Read-only copy of everything the presentation layer renders."""
        stations = []
        for puzzle in sorted(self.room_data.puzzles, key=lambda p: p.id):
            record = self.progress.get(puzzle.id)
            stations.append(
                StationView(
                    id=puzzle.id,
                    title=puzzle.title,
                    type=puzzle.type,
                    color=puzzle.color,
                    position=puzzle.position,
                    progress_percent=record.progress_percent if record else 0,
                    completed=puzzle.id in self.completed,
                )
            )

        return RoomSnapshot(
            state=self.state,
            activation_pending=self.activation_pending,
            pose=self.pose.model_copy(deep=True),
            session=self.session.model_copy() if self.session else None,
            progress={k: v.model_copy(deep=True) for k, v in self.progress.items()},
            completed=sorted(self.completed),
            global_facts=list(self.global_facts),
            stations=stations,
            active_puzzle=self.solver.view() if self.solver else None,
            fallback_notice=self.fallback_notice,
            all_completed=self.all_completed,
            clock=self.scheduler.now,
        )
