"""
Room schema models - Pydantic models for YAML room definitions
"""

from pydantic import BaseModel, Field

from mystery_room.models.event import PuzzleType, parse_puzzle_type

Vector3 = tuple[float, float, float]


class LookDirection(BaseModel):
    """Camera heading in radians"""
    horizontal: float = 0.0  # Yaw, 0 looks down -z
    vertical: float = 0.0    # Pitch, positive looks up


class PlayerSetup(BaseModel):
    """Initial player placement"""
    start_position: Vector3 = (0.0, 0.0, 0.0)
    look: LookDirection = Field(default_factory=LookDirection)


class ConnectionNode(BaseModel):
    """Node of a connection puzzle"""
    id: int
    label: str = ""
    fixed: bool = False  # Start/end anchors are fixed
    position: Vector3 = (0.0, 0.0, 0.0)


class ConnectionLayout(BaseModel):
    """Nodes and the directed solution path of a connection puzzle"""
    nodes: list[ConnectionNode]
    correct_sequence: list[tuple[int, int]]
    start_node: int
    end_node: int

    @classmethod
    def default(cls) -> "ConnectionLayout":
        """Six-stage project pipeline: Start, Analysis, Design, Development, Testing, End"""
        labels = ["Start", "Analysis", "Design", "Development", "Testing", "End"]
        positions = [
            (-3.0, 2.0, 0.0),
            (-2.0, -1.5, 0.0),
            (0.0, -1.2, 0.0),
            (1.5, -1.8, 0.0),
            (2.5, -1.0, 0.0),
            (3.0, 2.0, 0.0),
        ]
        nodes = [
            ConnectionNode(
                id=i + 1,
                label=label,
                fixed=i in (0, len(labels) - 1),
                position=positions[i],
            )
            for i, label in enumerate(labels)
        ]
        return cls(
            nodes=nodes,
            correct_sequence=[(i, i + 1) for i in range(1, len(labels))],
            start_node=1,
            end_node=len(labels),
        )


class CardSymbol(BaseModel):
    """One symbol of a pair-match deck (dealt twice)"""
    symbol: str
    label: str = ""
    color: str = "#ffffff"


class PairMatchLayout(BaseModel):
    """Symbols of a pair-match deck"""
    symbols: list[CardSymbol]

    @classmethod
    def default(cls) -> "PairMatchLayout":
        return cls(
            symbols=[
                CardSymbol(symbol="diamond", label="React", color="#FF5722"),
                CardSymbol(symbol="heart", label="Web", color="#F44336"),
                CardSymbol(symbol="spade", label="Design", color="#333333"),
                CardSymbol(symbol="club", label="Mobile", color="#4CAF50"),
                CardSymbol(symbol="star", label="Games", color="#2196F3"),
            ]
        )


class PieceDefinition(BaseModel):
    """Movable piece of a placement puzzle"""
    shape: str
    color: str = "#ffffff"
    start: Vector3
    target: Vector3


class PlacementLayout(BaseModel):
    """Pieces and snapping rule of a placement puzzle"""
    pieces: list[PieceDefinition]
    snap_threshold: float | None = None  # Falls back to settings when unset

    @classmethod
    def default(cls) -> "PlacementLayout":
        shapes = ["box", "sphere", "cylinder", "cone", "torus"]
        colors = ["#FF5252", "#FFEB3B", "#4CAF50", "#2196F3", "#9C27B0"]
        return cls(
            pieces=[
                PieceDefinition(
                    shape=shape,
                    color=colors[i],
                    start=(float(i - 2), -1.0, 0.0),
                    target=(float(i - 2), 1.0, 0.0),
                )
                for i, shape in enumerate(shapes)
            ]
        )


class Puzzle(BaseModel):
    """Puzzle station definition from room.yaml (immutable after load)"""
    model_config = {"frozen": True}

    id: int
    title: str
    type: str  # Raw tag; unknown types load and fall back at activation
    facts: tuple[str, ...]
    position: Vector3 = (0.0, 0.0, 0.0)  # World anchor of the station
    color: str = "#ffffff"
    connection: ConnectionLayout | None = None
    pair_match: PairMatchLayout | None = None
    placement: PlacementLayout | None = None

    @property
    def puzzle_type(self) -> PuzzleType | None:
        """The recognized puzzle type, or None for unknown tags"""
        return parse_puzzle_type(self.type)

    @property
    def total_facts(self) -> int:
        return len(self.facts)

    def connection_layout(self) -> ConnectionLayout:
        return self.connection or ConnectionLayout.default()

    def pair_match_layout(self) -> PairMatchLayout:
        return self.pair_match or PairMatchLayout.default()

    def placement_layout(self) -> PlacementLayout:
        return self.placement or PlacementLayout.default()


class Room(BaseModel):
    """Main room definition from room.yaml"""
    name: str
    description: str = ""
    player: PlayerSetup = Field(default_factory=PlayerSetup)


class RoomData(BaseModel):
    """Complete loaded room data"""
    room: Room
    puzzles: list[Puzzle]

    def get_puzzle(self, puzzle_id: int) -> Puzzle | None:
        """Get a puzzle by ID"""
        for puzzle in self.puzzles:
            if puzzle.id == puzzle_id:
                return puzzle
        return None

    def get_puzzle_by_type(self, puzzle_type: PuzzleType) -> Puzzle | None:
        """Get the first puzzle of a type"""
        for puzzle in self.puzzles:
            if puzzle.puzzle_type == puzzle_type:
                return puzzle
        return None

    def puzzle_ids(self) -> list[int]:
        """Puzzle ids in ascending order"""
        return sorted(puzzle.id for puzzle in self.puzzles)
