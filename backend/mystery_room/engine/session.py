"""
Room sessions - one controller per visitor, with its own clock
"""

import logging
import time
import uuid
from datetime import datetime
from typing import Callable

from mystery_room.config import RoomSettings, get_default_room, get_settings, is_realtime
from mystery_room.engine.controller import RoomController
from mystery_room.engine.room_loader import RoomLoader
from mystery_room.engine.scheduler import DeferredScheduler
from mystery_room.models.room import RoomData
from mystery_room.models.state import RoomSnapshot

logger = logging.getLogger(__name__)


class RoomSession:
    """Owns a RoomController and drives its scheduler.

    In real-time mode every call to sync() advances the scheduler by the
    wall-clock time elapsed since the previous sync, so deferred
    transitions fire as the visitor plays. Otherwise time only moves
    through advance().
    """

    def __init__(
        self,
        room_id: str | None = None,
        loader: RoomLoader | None = None,
        settings: RoomSettings | None = None,
        realtime: bool | None = None,
        seed: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        room_data: RoomData | None = None,
    ):
        """Initialize a new room session"""
        self.session_id = str(uuid.uuid4())
        self.room_id = room_id or get_default_room()
        self.created_at = datetime.now()
        self.realtime = is_realtime() if realtime is None else realtime
        self._clock = clock
        self._last_sync = clock()

        if room_data is None:
            loader = loader or RoomLoader()
            room_data = loader.load_room(self.room_id)

        self.controller = RoomController(
            room_data,
            scheduler=DeferredScheduler(),
            settings=settings or get_settings(),
            seed=seed,
        )
        logger.info(
            f"Session {self.session_id} started in room '{self.room_id}' "
            f"({'real-time' if self.realtime else 'manual clock'})"
        )

    @property
    def scheduler(self) -> DeferredScheduler:
        return self.controller.scheduler

    def sync(self) -> int:
        """Catch the scheduler up with the wall clock (real-time mode only).

        Returns:
            Number of deferred transitions fired
        """
        now = self._clock()
        elapsed = max(0.0, now - self._last_sync)
        self._last_sync = now
        if not self.realtime or elapsed == 0:
            return 0
        return self.scheduler.advance(elapsed)

    def advance(self, seconds: float) -> int:
        """Move the session clock forward explicitly."""
        fired = self.scheduler.advance(seconds)
        logger.debug(f"Session {self.session_id} advanced {seconds}s, {fired} transition(s) fired")
        return fired

    def get_snapshot(self) -> RoomSnapshot:
        """Current render input"""
        return self.controller.snapshot()
