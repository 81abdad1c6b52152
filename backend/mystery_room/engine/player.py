"""
Player pose math - walking, looking, and the approach pose used when a
puzzle station is activated.

All functions are pure: they take a pose and return a new one.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from mystery_room.models.room import LookDirection, Vector3
from mystery_room.models.state import PlayerPose

if TYPE_CHECKING:
    from mystery_room.config import RoomSettings


def _normalize(x: float, y: float, z: float) -> Vector3 | None:
    length = math.sqrt(x * x + y * y + z * z)
    if length == 0:
        return None
    return (x / length, y / length, z / length)


def look_angles(origin: Vector3, target: Vector3) -> LookDirection:
    """Yaw/pitch that aims from origin at target.

    Args:
        origin: Eye position
        target: Point to look at

    Returns:
        LookDirection with horizontal = atan2(dx, -dz) and
        vertical = atan2(dy, horizontal distance)
    """
    dx = target[0] - origin[0]
    dy = target[1] - origin[1]
    dz = target[2] - origin[2]
    return LookDirection(
        horizontal=math.atan2(dx, -dz),
        vertical=math.atan2(dy, math.hypot(dx, dz)),
    )


def approach_pose(
    player: PlayerPose,
    station: Vector3,
    settings: "RoomSettings",
) -> PlayerPose:
    """Pose in front of a station, looking at it.

    The player is placed approach_distance away from the station along the
    line from the station to the player, at eye level.

    Args:
        player: Current player pose
        station: World anchor of the puzzle station
        settings: Engine settings (approach distance, eye level)

    Returns:
        The approach PlayerPose
    """
    direction = _normalize(
        player.position[0] - station[0],
        player.position[1] - station[1],
        player.position[2] - station[2],
    )
    if direction is None:
        # Standing on the anchor: step back towards +z
        direction = (0.0, 0.0, 1.0)

    position = (
        station[0] + direction[0] * settings.approach_distance,
        settings.eye_level,
        station[2] + direction[2] * settings.approach_distance,
    )
    target = (station[0], settings.eye_level, station[2])
    return PlayerPose(position=position, look=look_angles(position, target))


def walk(
    pose: PlayerPose,
    forward: float,
    strafe: float,
    settings: "RoomSettings",
) -> PlayerPose:
    """Move along the look heading, clamped to the room bounds.

    Args:
        pose: Current pose
        forward: Positive walks forward, negative backward
        strafe: Positive steps right, negative left
        settings: Engine settings (walk speed, room half extent)

    Returns:
        The new pose (same pose if there is no movement)
    """
    heading = pose.look.horizontal
    forward_x, forward_z = math.sin(heading), -math.cos(heading)
    right_x, right_z = (
        math.sin(heading + math.pi / 2),
        -math.cos(heading + math.pi / 2),
    )

    dx = forward_x * forward + right_x * strafe
    dz = forward_z * forward + right_z * strafe
    length = math.hypot(dx, dz)
    if length == 0:
        return pose.model_copy(deep=True)

    bound = settings.room_half_extent
    x = pose.position[0] + dx / length * settings.walk_speed
    z = pose.position[2] + dz / length * settings.walk_speed
    return PlayerPose(
        position=(
            max(-bound, min(bound, x)),
            pose.position[1],
            max(-bound, min(bound, z)),
        ),
        look=pose.look.model_copy(),
    )


def turn(
    pose: PlayerPose,
    dx: float,
    dy: float,
    settings: "RoomSettings",
) -> PlayerPose:
    """Apply a mouse-look delta; pitch is clamped to +/- max_pitch."""
    horizontal = pose.look.horizontal - dx * settings.look_speed
    vertical = max(
        -settings.max_pitch,
        min(settings.max_pitch, pose.look.vertical - dy * settings.look_speed),
    )
    return PlayerPose(
        position=tuple(pose.position),
        look=LookDirection(horizontal=horizontal, vertical=vertical),
    )
