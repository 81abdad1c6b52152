"""
Room Validator - Validates consistency of YAML room definitions

Checks:
- Puzzle ids: unique and exactly 1..N
- Facts: every puzzle has facts, one per solve step of its layout
- Connection layouts: sequence and start/end reference known nodes,
  no self-loops or duplicate correct edges
- Pair-match layouts: no duplicate symbols
- Placement layouts: at least one piece
- Warnings: unknown puzzle types, fact text shared between puzzles,
  duplicate titles
"""

import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from mystery_room.engine.room_loader import RoomLoader
from mystery_room.models.event import PuzzleType
from mystery_room.models.room import Puzzle, RoomData


@dataclass
class ValidationResult:
    """Result of room validation"""

    room_id: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Room is valid if there are no errors (warnings are OK)"""
        return len(self.errors) == 0

    def add_error(self, message: str):
        self.errors.append(message)

    def add_warning(self, message: str):
        self.warnings.append(message)


class RoomValidator:
    """Validates room definition consistency"""

    def __init__(self, room_data: RoomData, room_id: str):
        self.room_data = room_data
        self.room_id = room_id
        self.result = ValidationResult(room_id=room_id)

    def validate(self) -> ValidationResult:
        """Run all validation checks"""
        self._validate_ids()
        for puzzle in self.room_data.puzzles:
            self._validate_puzzle(puzzle)
        self._detect_shared_facts()
        self._detect_duplicate_titles()

        return self.result

    def _validate_ids(self):
        """Puzzle ids must be unique and numbered 1..N"""
        ids = [p.id for p in self.room_data.puzzles]
        if not ids:
            self.result.add_error("Room has no puzzles")
            return

        for puzzle_id, count in Counter(ids).items():
            if count > 1:
                self.result.add_error(f"Puzzle id {puzzle_id} is used {count} times")

        if sorted(set(ids)) != list(range(1, len(set(ids)) + 1)):
            self.result.add_error(
                f"Puzzle ids must be numbered 1..{len(set(ids))}, got {sorted(set(ids))}"
            )

    def _validate_puzzle(self, puzzle: Puzzle):
        label = f"Puzzle {puzzle.id} ('{puzzle.title}')"

        if not puzzle.facts:
            self.result.add_error(f"{label} has no facts")

        puzzle_type = puzzle.puzzle_type
        if puzzle_type is None:
            self.result.add_warning(
                f"{label} has unknown type '{puzzle.type}' and will show a fallback notice"
            )
            return

        if puzzle_type == PuzzleType.CONNECTION:
            steps = self._validate_connection(puzzle, label)
        elif puzzle_type == PuzzleType.PAIR_MATCH:
            steps = self._validate_pair_match(puzzle, label)
        else:
            steps = self._validate_placement(puzzle, label)

        if puzzle.facts and steps != len(puzzle.facts):
            self.result.add_error(
                f"{label} has {len(puzzle.facts)} fact(s) but {steps} solve step(s)"
            )

    def _validate_connection(self, puzzle: Puzzle, label: str) -> int:
        layout = puzzle.connection_layout()
        node_ids = {node.id for node in layout.nodes}

        for node_id, count in Counter(node.id for node in layout.nodes).items():
            if count > 1:
                self.result.add_error(f"{label} has duplicate node {node_id}")

        for which, node_id in (("start", layout.start_node), ("end", layout.end_node)):
            if node_id not in node_ids:
                self.result.add_error(f"{label} {which} node {node_id} is not a node")

        seen: set[frozenset[int]] = set()
        for a, b in layout.correct_sequence:
            for node_id in (a, b):
                if node_id not in node_ids:
                    self.result.add_error(
                        f"{label} correct edge ({a}, {b}) references unknown node {node_id}"
                    )
            if a == b:
                self.result.add_error(f"{label} correct edge ({a}, {b}) is a self-loop")
            pair = frozenset((a, b))
            if pair in seen:
                self.result.add_error(f"{label} correct edge ({a}, {b}) is listed twice")
            seen.add(pair)

        return len(layout.correct_sequence)

    def _validate_pair_match(self, puzzle: Puzzle, label: str) -> int:
        layout = puzzle.pair_match_layout()
        if not layout.symbols:
            self.result.add_error(f"{label} has no card symbols")

        for symbol, count in Counter(s.symbol for s in layout.symbols).items():
            if count > 1:
                self.result.add_error(f"{label} lists symbol '{symbol}' {count} times")

        return len(layout.symbols)

    def _validate_placement(self, puzzle: Puzzle, label: str) -> int:
        layout = puzzle.placement_layout()
        if not layout.pieces:
            self.result.add_error(f"{label} has no pieces")
        if layout.snap_threshold is not None and layout.snap_threshold <= 0:
            self.result.add_error(f"{label} snap_threshold must be positive")
        return len(layout.pieces)

    def _detect_shared_facts(self):
        """Identical fact text in two puzzles is shown once (warning only)"""
        owners: dict[str, list[int]] = {}
        for puzzle in self.room_data.puzzles:
            for fact in dict.fromkeys(puzzle.facts):
                owners.setdefault(fact, []).append(puzzle.id)

        for fact, puzzle_ids in owners.items():
            if len(puzzle_ids) > 1:
                self.result.add_warning(
                    f"Fact '{fact}' appears in puzzles {puzzle_ids} and will be shown once"
                )

    def _detect_duplicate_titles(self):
        for title, count in Counter(p.title for p in self.room_data.puzzles).items():
            if count > 1:
                self.result.add_warning(f"Title '{title}' is used by {count} puzzles")


def validate_room(
    room_id: str, rooms_dir: str | Path | None = None
) -> ValidationResult:
    """
    Validate a room definition for consistency.

    Args:
        room_id: The room identifier (folder name in the rooms directory)
        rooms_dir: Optional path to the rooms directory

    Returns:
        ValidationResult with errors and warnings
    """
    loader = RoomLoader(rooms_dir)
    room_data = loader.load_room(room_id, validate=False)

    validator = RoomValidator(room_data, room_id)
    return validator.validate()


def main():
    """CLI entry point for room validation"""
    if len(sys.argv) < 2:
        print("Usage: python -m mystery_room.engine.validator <room_id>")
        print("Example: python -m mystery_room.engine.validator portfolio")
        sys.exit(1)

    room_id = sys.argv[1]

    try:
        result = validate_room(room_id)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    # Print results
    print(f"\n{'='*60}")
    print(f"Room Validation: {room_id}")
    print(f"{'='*60}\n")

    if result.errors:
        print(f"ERRORS ({len(result.errors)}):")
        for error in result.errors:
            print(f"  ❌ {error}")
        print()

    if result.warnings:
        print(f"WARNINGS ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  ⚠️  {warning}")
        print()

    if result.is_valid:
        print("✅ Room is valid!")
        if result.warnings:
            print(f"   (but has {len(result.warnings)} warning(s))")
    else:
        print(f"❌ Room has {len(result.errors)} error(s)")

    sys.exit(0 if result.is_valid else 1)


if __name__ == "__main__":
    main()
