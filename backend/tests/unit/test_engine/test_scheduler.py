"""Unit tests for DeferredScheduler.

Tests cover:
- Firing order by due time, then by scheduling order
- Transitions scheduled from callbacks within the same advance
- Cancellation (single and by owner)
- Negative delays and advances
"""

import pytest

from mystery_room.engine.scheduler import DeferredScheduler


class TestScheduling:
    """Tests for schedule() and advance()."""

    def test_nothing_fires_before_due(self, scheduler: DeferredScheduler) -> None:
        """A transition does not fire until its due time."""
        fired = []
        scheduler.schedule(1.0, lambda: fired.append("a"))

        assert scheduler.advance(0.5) == 0
        assert fired == []
        assert scheduler.now == 0.5

    def test_fires_at_due_time(self, scheduler: DeferredScheduler) -> None:
        """A transition fires when the clock reaches its due time."""
        fired = []
        scheduler.schedule(0.5, lambda: fired.append("a"))

        assert scheduler.advance(0.5) == 1
        assert fired == ["a"]

    def test_fires_in_due_order(self, scheduler: DeferredScheduler) -> None:
        """Transitions fire by due time regardless of scheduling order."""
        fired = []
        scheduler.schedule(2.0, lambda: fired.append("late"))
        scheduler.schedule(1.0, lambda: fired.append("early"))

        scheduler.advance(3.0)

        assert fired == ["early", "late"]

    def test_ties_fire_in_scheduling_order(self, scheduler: DeferredScheduler) -> None:
        """Transitions with the same due time fire first-scheduled first."""
        fired = []
        for name in ("a", "b", "c"):
            scheduler.schedule(1.0, lambda name=name: fired.append(name))

        scheduler.advance(1.0)

        assert fired == ["a", "b", "c"]

    def test_clock_is_due_time_inside_callback(self, scheduler: DeferredScheduler) -> None:
        """Callbacks observe the clock at their own due time."""
        seen = []
        scheduler.schedule(1.0, lambda: seen.append(scheduler.now))

        scheduler.advance(5.0)

        assert seen == [1.0]
        assert scheduler.now == 5.0

    def test_chained_transition_fires_in_same_advance(
        self, scheduler: DeferredScheduler
    ) -> None:
        """A transition scheduled by a callback fires if it falls due in the window."""
        fired = []

        def first() -> None:
            fired.append("first")
            scheduler.schedule(1.0, lambda: fired.append("second"))

        scheduler.schedule(1.0, first)

        assert scheduler.advance(3.0) == 2
        assert fired == ["first", "second"]

    def test_chained_transition_outside_window_waits(
        self, scheduler: DeferredScheduler
    ) -> None:
        """A chained transition past the window stays pending."""
        fired = []
        scheduler.schedule(1.0, lambda: scheduler.schedule(5.0, lambda: fired.append("x")))

        scheduler.advance(2.0)

        assert fired == []
        assert len(scheduler.pending()) == 1
        assert scheduler.pending()[0].due_at == 6.0

    def test_transition_fires_once(self, scheduler: DeferredScheduler) -> None:
        """A fired transition is not fired again."""
        fired = []
        transition = scheduler.schedule(0.1, lambda: fired.append(1))

        scheduler.advance(1.0)
        scheduler.advance(1.0)

        assert fired == [1]
        assert transition.fired is True
        assert transition.live is False

    def test_negative_delay_rejected(self, scheduler: DeferredScheduler) -> None:
        """Scheduling in the past raises ValueError."""
        with pytest.raises(ValueError):
            scheduler.schedule(-0.1, lambda: None)

    def test_negative_advance_rejected(self, scheduler: DeferredScheduler) -> None:
        """Advancing backwards raises ValueError."""
        with pytest.raises(ValueError):
            scheduler.advance(-1.0)

    def test_advance_to_past_is_noop(self) -> None:
        """advance_to() a time before now fires nothing and keeps the clock."""
        scheduler = DeferredScheduler(start=10.0)

        assert scheduler.advance_to(5.0) == 0
        assert scheduler.now == 10.0


class TestCancellation:
    """Tests for cancel(), cancel_owner() and pending()."""

    def test_cancelled_transition_never_fires(self, scheduler: DeferredScheduler) -> None:
        """cancel() prevents the callback from running."""
        fired = []
        transition = scheduler.schedule(1.0, lambda: fired.append(1))

        assert scheduler.cancel(transition) is True
        scheduler.advance(2.0)

        assert fired == []

    def test_cancel_twice_returns_false(self, scheduler: DeferredScheduler) -> None:
        """Cancelling a dead transition reports False."""
        transition = scheduler.schedule(1.0, lambda: None)
        scheduler.cancel(transition)

        assert scheduler.cancel(transition) is False

    def test_cancel_owner(self, scheduler: DeferredScheduler) -> None:
        """cancel_owner() only touches that owner's transitions."""
        fired = []
        scheduler.schedule(1.0, lambda: fired.append("a1"), owner="a")
        scheduler.schedule(1.0, lambda: fired.append("a2"), owner="a")
        scheduler.schedule(1.0, lambda: fired.append("b"), owner="b")

        assert scheduler.cancel_owner("a") == 2
        scheduler.advance(1.0)

        assert fired == ["b"]

    def test_pending_lists_live_in_order(self, scheduler: DeferredScheduler) -> None:
        """pending() lists live transitions in firing order, filterable by owner."""
        late = scheduler.schedule(2.0, lambda: None, owner="x", label="late")
        early = scheduler.schedule(1.0, lambda: None, owner="y", label="early")

        assert scheduler.pending() == [early, late]
        assert scheduler.pending(owner="x") == [late]

        scheduler.cancel(early)
        assert scheduler.pending() == [late]
