"""Puzzle progression engine.

- `controller.py`: RoomController, the room state machine and fact aggregator
- `solvers/`: Connection, pair-match and placement solvers
- `scheduler.py` / `notices.py`: Deferred transitions on a simulated clock
- `session.py`: Per-visitor sessions used by the API
- `room_loader.py` / `validator.py`: YAML room loading and checks

Import directly from submodules to avoid circular imports:
    from mystery_room.engine.controller import RoomController
    from mystery_room.engine.session import RoomSession
"""

# Note: No eager imports to avoid circular import issues
