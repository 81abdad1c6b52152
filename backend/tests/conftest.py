"""
Shared pytest fixtures for Mystery Room backend tests.

This module provides:
- sample_room_data: Three-puzzle RoomData built in code (default layouts)
- scheduler / settings: Simulated clock and default engine settings
- controller: RoomController in EXPLORING state
- activate: Helper that activates a puzzle and lets it lock
- rooms_dir: Temporary rooms directory with a valid and a broken room
- Custom markers for test categorization
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
import yaml

# Add backend to path for imports
backend_path = Path(__file__).parent.parent
if str(backend_path) not in sys.path:
    sys.path.insert(0, str(backend_path))

from mystery_room.config import RoomSettings  # noqa: E402
from mystery_room.engine.controller import RoomController  # noqa: E402
from mystery_room.engine.scheduler import DeferredScheduler  # noqa: E402
from mystery_room.models.room import (  # noqa: E402
    LookDirection,
    PlayerSetup,
    Room,
    RoomData,
)
from tests.helpers import (  # noqa: E402
    CONNECTION_FACTS,
    PAIR_MATCH_FACTS,
    PLACEMENT_FACTS,
    make_puzzle,
    room_yaml,
)


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


# =============================================================================
# Room Data Fixtures
# =============================================================================


@pytest.fixture
def sample_room_data() -> RoomData:
    """Minimal room mirroring the portfolio exhibit.

    Puzzles:
    - 1: placement, 5 facts
    - 2: connection, 5 facts (chain 1->2->3->4->5->6)
    - 3: pair_match, 5 facts (5 symbols)
    """
    return RoomData(
        room=Room(
            name="Test Room",
            description="A room for testing",
            player=PlayerSetup(
                start_position=(0.0, 1.7, 5.0),
                look=LookDirection(horizontal=0.1, vertical=-0.2),
            ),
        ),
        puzzles=[
            make_puzzle(1, "placement", PLACEMENT_FACTS, title="Skills"),
            make_puzzle(2, "connection", CONNECTION_FACTS, title="Experience"),
            make_puzzle(3, "pair_match", PAIR_MATCH_FACTS, title="Interests"),
        ],
    )


@pytest.fixture
def settings() -> RoomSettings:
    """Default engine settings."""
    return RoomSettings()


@pytest.fixture
def scheduler() -> DeferredScheduler:
    """Fresh simulated clock at t=0."""
    return DeferredScheduler()


# =============================================================================
# Controller Fixtures
# =============================================================================


@pytest.fixture
def controller(sample_room_data, scheduler, settings) -> RoomController:
    """Controller in EXPLORING state with a seeded pair-match shuffle."""
    return RoomController(sample_room_data, scheduler, settings, seed=7)


@pytest.fixture
def activate(settings) -> Callable[[RoomController, int], None]:
    """Activate a puzzle and let the activation delay elapse."""

    def _activate(controller: RoomController, puzzle_id: int) -> None:
        result = controller.activate_puzzle(puzzle_id)
        assert result.accepted, result.rejection_reason
        controller.scheduler.advance(settings.activation_delay)

    return _activate


# =============================================================================
# Room Files
# =============================================================================


@pytest.fixture
def rooms_dir(tmp_path) -> Path:
    """Rooms directory with 'tiny' (valid) and 'broken' (duplicate ids)."""
    tiny = tmp_path / "tiny"
    tiny.mkdir()
    (tiny / "room.yaml").write_text(yaml.safe_dump(room_yaml()))

    broken_data = room_yaml(name="Broken Room")
    broken_data["puzzles"].append(dict(broken_data["puzzles"][0], title="Copy"))
    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "room.yaml").write_text(yaml.safe_dump(broken_data))

    (tmp_path / "not-a-room").mkdir()
    return tmp_path
