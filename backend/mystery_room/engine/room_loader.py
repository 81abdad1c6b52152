"""
Room loader - Load and validate YAML room files
"""

import logging
from pathlib import Path

import yaml

from mystery_room.config import get_rooms_dir
from mystery_room.models.room import (
    CardSymbol,
    ConnectionLayout,
    ConnectionNode,
    LookDirection,
    PairMatchLayout,
    PieceDefinition,
    PlacementLayout,
    PlayerSetup,
    Puzzle,
    Room,
    RoomData,
)

logger = logging.getLogger(__name__)


def _vector(value, default=(0.0, 0.0, 0.0)) -> tuple[float, float, float]:
    if value is None:
        return default
    if len(value) != 3:
        raise ValueError(f"Expected [x, y, z], got {value!r}")
    return (float(value[0]), float(value[1]), float(value[2]))


class RoomLoader:
    """Loads rooms from YAML files"""

    def __init__(self, rooms_dir: str | Path | None = None):
        """Initialize with rooms directory path"""
        if rooms_dir is None:
            rooms_dir = get_rooms_dir()
        self.rooms_dir = Path(rooms_dir)

    def list_rooms(self) -> list[dict]:
        """List available rooms with metadata"""
        rooms = []

        if not self.rooms_dir.exists():
            return rooms

        for room_path in sorted(self.rooms_dir.iterdir()):
            room_yaml = room_path / "room.yaml"
            if not room_path.is_dir() or not room_yaml.exists():
                continue
            try:
                with open(room_yaml) as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                logger.warning(f"Skipping room '{room_path.name}': {e}")
                continue
            rooms.append({
                "id": room_path.name,
                "name": data.get("name", room_path.name),
                "description": data.get("description", ""),
                "puzzle_count": len(data.get("puzzles") or []),
            })

        return rooms

    def load_room(self, room_id: str, validate: bool = True) -> RoomData:
        """
        Load a complete room from its room.yaml.

        Args:
            room_id: The room identifier (folder name in the rooms directory)
            validate: Whether to validate the room on load (default True)

        Returns:
            RoomData with the room and its puzzles

        Raises:
            FileNotFoundError: If the room doesn't exist
            ValueError: If the YAML or an entry is malformed, or validation fails and validate=True
        """
        room_yaml = self.rooms_dir / room_id / "room.yaml"

        if not room_yaml.exists():
            raise FileNotFoundError(f"Room '{room_id}' not found at {room_yaml.parent}")

        with open(room_yaml) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Room '{room_id}' is not valid YAML: {e}") from e

        try:
            room_data = RoomData(
                room=self._parse_room(data),
                puzzles=[self._parse_puzzle(p) for p in data.get("puzzles") or []],
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ValueError(f"Room '{room_id}' is malformed: {e!r}") from e

        if validate:
            from mystery_room.engine.validator import RoomValidator
            validator = RoomValidator(room_data, room_id)
            result = validator.validate()

            for warning in result.warnings:
                logger.warning(f"Room '{room_id}': {warning}")

            if not result.is_valid:
                error_list = "\n  - ".join(result.errors)
                raise ValueError(
                    f"Room '{room_id}' validation failed with {len(result.errors)} error(s):\n  - {error_list}"
                )

        logger.info(f"Loaded room '{room_id}' with {len(room_data.puzzles)} puzzle(s)")
        return room_data

    def _parse_room(self, data: dict) -> Room:
        player_data = data.get("player") or {}
        look_data = player_data.get("look") or {}
        player = PlayerSetup(
            start_position=_vector(player_data.get("start_position")),
            look=LookDirection(
                horizontal=look_data.get("horizontal", 0.0),
                vertical=look_data.get("vertical", 0.0),
            ),
        )
        return Room(
            name=data.get("name", "Unnamed Room"),
            description=data.get("description", ""),
            player=player,
        )

    def _parse_puzzle(self, data: dict) -> Puzzle:
        """Parse one puzzle entry; layout blocks are optional"""
        connection = None
        if data.get("connection"):
            block = data["connection"]
            connection = ConnectionLayout(
                nodes=[
                    ConnectionNode(
                        id=node["id"],
                        label=node.get("label", ""),
                        fixed=node.get("fixed", False),
                        position=_vector(node.get("position")),
                    )
                    for node in block.get("nodes", [])
                ],
                correct_sequence=[tuple(edge) for edge in block.get("correct_sequence", [])],
                start_node=block.get("start_node", 1),
                end_node=block.get("end_node", len(block.get("nodes", []))),
            )

        pair_match = None
        if data.get("pair_match"):
            pair_match = PairMatchLayout(
                symbols=[
                    CardSymbol(
                        symbol=s["symbol"],
                        label=s.get("label", ""),
                        color=s.get("color", "#ffffff"),
                    )
                    for s in data["pair_match"].get("symbols", [])
                ]
            )

        placement = None
        if data.get("placement"):
            block = data["placement"]
            placement = PlacementLayout(
                pieces=[
                    PieceDefinition(
                        shape=p["shape"],
                        color=p.get("color", "#ffffff"),
                        start=_vector(p.get("start")),
                        target=_vector(p.get("target")),
                    )
                    for p in block.get("pieces", [])
                ],
                snap_threshold=block.get("snap_threshold"),
            )

        return Puzzle(
            id=data["id"],
            title=data.get("title", f"Puzzle {data['id']}"),
            type=str(data.get("type", "")),
            facts=tuple(data.get("facts") or []),
            position=_vector(data.get("position")),
            color=data.get("color", "#ffffff"),
            connection=connection,
            pair_match=pair_match,
            placement=placement,
        )
