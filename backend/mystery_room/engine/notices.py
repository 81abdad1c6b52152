"""
Transient notices - single-slot messages that expire on the scheduler clock.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mystery_room.models.state import NoticeKind, TransientNotice

if TYPE_CHECKING:
    from mystery_room.engine.scheduler import DeferredScheduler


class NoticeSlot:
    """Holds at most one transient notice.

    Posting replaces the current notice. Each post bumps a serial; the
    expiry callback only clears the slot if its serial is still current,
    so the timer of a superseded notice does nothing.

    Example:
        >>> slot = NoticeSlot(scheduler, owner="connection")
        >>> _ = slot.post("Some connections aren't correct", NoticeKind.WARNING, ttl=3.0)
        >>> _ = scheduler.advance(3.0)
        >>> slot.current is None
        True
    """

    def __init__(self, scheduler: "DeferredScheduler", owner: str):
        self._scheduler = scheduler
        self._owner = owner
        self._serial = 0
        self.current: TransientNotice | None = None

    def post(
        self,
        message: str,
        kind: NoticeKind,
        ttl: float,
        subject: object | None = None,
    ) -> TransientNotice:
        """Show a notice for ttl seconds, replacing any current one."""
        self._serial += 1
        serial = self._serial
        now = self._scheduler.now
        self.current = TransientNotice(
            message=message,
            kind=kind,
            issued_at=now,
            expires_at=now + ttl,
            subject=subject,
        )

        def expire() -> None:
            if self._serial == serial:
                self.current = None

        self._scheduler.schedule(
            ttl, expire, owner=self._owner, label=f"{kind.value}-expiry"
        )
        return self.current

    def clear(self) -> None:
        """Remove the current notice immediately."""
        self._serial += 1
        self.current = None

    @property
    def message(self) -> str | None:
        return self.current.message if self.current else None
