"""
Settings - Timings, distances and paths, overridable from the environment
"""

import math
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables
load_dotenv()

PACKAGE_ROOT = Path(__file__).parent
DEFAULT_ROOMS_DIR = PACKAGE_ROOT / "rooms"


def get_rooms_dir() -> Path:
    """Get the directory holding room definitions"""
    return Path(os.getenv("MYSTERY_ROOM_ROOMS_DIR", str(DEFAULT_ROOMS_DIR)))


def get_default_room() -> str:
    """Get the room loaded when a session does not name one"""
    return os.getenv("MYSTERY_ROOM_DEFAULT_ROOM", "portfolio")


def get_log_level() -> str:
    """Get the logging level for the API process"""
    return os.getenv("MYSTERY_ROOM_LOG_LEVEL", "INFO").upper()


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class RoomSettings(BaseModel):
    """Engine constants (seconds and world units)"""

    # Deferred transitions
    activation_delay: float = 0.3      # Camera settle before the puzzle locks
    settle_delay: float = 0.5          # Pair-match: before the pair is compared
    mismatch_delay: float = 0.5        # Pair-match: before a mismatch flips back
    warning_ttl: float = 3.0
    celebration_ttl: float = 2.0

    # Geometry
    snap_threshold: float = 1.0
    approach_distance: float = 3.0
    eye_level: float = 1.7
    walk_speed: float = 0.1
    look_speed: float = 0.02
    room_half_extent: float = 9.0
    max_pitch: float = Field(default=math.pi / 3)

    @field_validator(
        "activation_delay",
        "settle_delay",
        "mismatch_delay",
        "warning_ttl",
        "celebration_ttl",
    )
    @classmethod
    def check_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("delays must not be negative")
        return value

    @field_validator("snap_threshold", "approach_distance", "room_half_extent")
    @classmethod
    def check_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("distances must be positive")
        return value


def get_settings() -> RoomSettings:
    """Build settings from defaults and MYSTERY_ROOM_* environment variables"""
    defaults = RoomSettings()
    return RoomSettings(
        activation_delay=_get_float(
            "MYSTERY_ROOM_ACTIVATION_DELAY", defaults.activation_delay
        ),
        settle_delay=_get_float("MYSTERY_ROOM_SETTLE_DELAY", defaults.settle_delay),
        mismatch_delay=_get_float(
            "MYSTERY_ROOM_MISMATCH_DELAY", defaults.mismatch_delay
        ),
        warning_ttl=_get_float("MYSTERY_ROOM_WARNING_TTL", defaults.warning_ttl),
        celebration_ttl=_get_float(
            "MYSTERY_ROOM_CELEBRATION_TTL", defaults.celebration_ttl
        ),
        snap_threshold=_get_float(
            "MYSTERY_ROOM_SNAP_THRESHOLD", defaults.snap_threshold
        ),
        approach_distance=_get_float(
            "MYSTERY_ROOM_APPROACH_DISTANCE", defaults.approach_distance
        ),
    )


def is_realtime() -> bool:
    """Whether API sessions follow the wall clock (otherwise /advance drives time)"""
    return os.getenv("MYSTERY_ROOM_REALTIME", "true").lower() in ("1", "true", "yes")
