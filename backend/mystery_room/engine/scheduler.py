"""
Deferred transitions for the puzzle progression engine.

The exhibit runs on a single cooperative event loop, but several
transitions fire after a fixed delay (pair-match settle/reset, puzzle
activation, notice expiry). They are represented as explicit
ScheduledTransition records on a simulated clock so tests advance time
instead of sleeping.

Cancellation is available but never relied on: every callback captures a
liveness token from its owner and becomes a no-op when the owner's state
has moved on.

Example:
    >>> scheduler = DeferredScheduler()
    >>> fired = []
    >>> _ = scheduler.schedule(0.5, lambda: fired.append("settle"), owner="pair_match")
    >>> scheduler.advance(0.4)
    0
    >>> scheduler.advance(0.1)
    1
    >>> fired
    ['settle']
"""

from __future__ import annotations

import heapq
import logging
from dataclasses import dataclass, field
from itertools import count
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class ScheduledTransition:
    """A callback due at a point on the scheduler clock.

    Attributes:
        transition_id: Monotonic id, also the tie-breaker for equal due times
        due_at: Clock time at which the callback fires
        owner: Who scheduled it (used for listing and bulk cancellation)
        label: Short description for logs
        callback: Zero-argument callable
        fired: Set once the callback has run
        cancelled: Set by cancel(); a cancelled transition never fires
    """

    transition_id: int
    due_at: float
    owner: str
    label: str
    callback: Callable[[], None] = field(repr=False)
    fired: bool = False
    cancelled: bool = False

    @property
    def live(self) -> bool:
        return not (self.fired or self.cancelled)


class DeferredScheduler:
    """Simulated-clock scheduler for deferred transitions.

    Attributes:
        now: Current clock time in seconds
    """

    def __init__(self, start: float = 0.0):
        self.now = start
        self._queue: list[tuple[float, int, ScheduledTransition]] = []
        self._ids = count(1)

    def schedule(
        self,
        delay: float,
        callback: Callable[[], None],
        owner: str = "",
        label: str = "",
    ) -> ScheduledTransition:
        """Schedule a callback after a delay.

        Args:
            delay: Seconds from now (must not be negative)
            callback: Zero-argument callable
            owner: Owner tag for listing/cancellation
            label: Description for logs

        Returns:
            The ScheduledTransition record
        """
        if delay < 0:
            raise ValueError(f"Cannot schedule in the past (delay={delay})")

        transition = ScheduledTransition(
            transition_id=next(self._ids),
            due_at=self.now + delay,
            owner=owner,
            label=label,
            callback=callback,
        )
        heapq.heappush(
            self._queue, (transition.due_at, transition.transition_id, transition)
        )
        logger.debug(
            f"Scheduled {owner}/{label} #{transition.transition_id} at t={transition.due_at:.3f}"
        )
        return transition

    def cancel(self, transition: ScheduledTransition) -> bool:
        """Cancel a transition that has not fired yet.

        Returns:
            True if the transition was live and is now cancelled
        """
        if not transition.live:
            return False
        transition.cancelled = True
        return True

    def cancel_owner(self, owner: str) -> int:
        """Cancel every live transition of an owner.

        Returns:
            Number of transitions cancelled
        """
        cancelled = 0
        for _, _, transition in self._queue:
            if transition.owner == owner and self.cancel(transition):
                cancelled += 1
        return cancelled

    def pending(self, owner: str | None = None) -> list[ScheduledTransition]:
        """List live transitions in firing order, optionally for one owner."""
        live = [
            transition
            for _, _, transition in sorted(self._queue)
            if transition.live
        ]
        if owner is not None:
            live = [t for t in live if t.owner == owner]
        return live

    def advance(self, seconds: float) -> int:
        """Advance the clock, firing every transition that falls due.

        Transitions scheduled by a callback fire in the same call when
        they fall due before the new clock time.

        Args:
            seconds: Amount of time to advance (must not be negative)

        Returns:
            Number of callbacks run
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance by a negative amount ({seconds})")
        return self.advance_to(self.now + seconds)

    def advance_to(self, target: float) -> int:
        """Advance the clock to an absolute time. See advance()."""
        if target < self.now:
            return 0

        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due_at, _, transition = heapq.heappop(self._queue)
            if not transition.live:
                continue
            self.now = due_at
            transition.fired = True
            logger.debug(
                f"Firing {transition.owner}/{transition.label} #{transition.transition_id} at t={due_at:.3f}"
            )
            transition.callback()
            fired += 1

        self.now = target
        return fired
