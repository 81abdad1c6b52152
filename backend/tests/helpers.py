"""Test data builders shared by unit and integration tests."""

from __future__ import annotations

from mystery_room.models.room import Puzzle

PLACEMENT_FACTS = tuple(f"Skill fact {i}" for i in range(1, 6))
CONNECTION_FACTS = tuple(f"Experience fact {i}" for i in range(1, 6))
PAIR_MATCH_FACTS = tuple(f"Interest fact {i}" for i in range(1, 6))


def make_puzzle(puzzle_id: int, puzzle_type: str, facts: tuple[str, ...], **kwargs) -> Puzzle:
    """Build a puzzle that uses the built-in layout of its type."""
    defaults = {
        "title": f"Puzzle {puzzle_id}",
        "position": (float(puzzle_id * 4 - 8), 0.0, -4.0),
        "color": "#123456",
    }
    defaults.update(kwargs)
    return Puzzle(id=puzzle_id, type=puzzle_type, facts=facts, **defaults)


def find_pair(cards) -> tuple[int, int]:
    """Indices of the first two cards sharing a symbol."""
    seen: dict[str, int] = {}
    for i, card in enumerate(cards):
        if card.matched:
            continue
        if card.symbol in seen:
            return seen[card.symbol], i
        seen[card.symbol] = i
    raise AssertionError("No unmatched pair left")


def find_mismatch(cards) -> tuple[int, int]:
    """Indices of two unmatched cards with different symbols."""
    unmatched = [i for i, card in enumerate(cards) if not card.matched]
    first = unmatched[0]
    for i in unmatched[1:]:
        if cards[i].symbol != cards[first].symbol:
            return first, i
    raise AssertionError("No mismatching cards left")


def room_yaml(**overrides) -> dict:
    """Minimal valid room.yaml content (one connection puzzle)."""
    data = {
        "name": "Tiny Room",
        "description": "One station",
        "player": {"start_position": [0, 1.7, 4], "look": {"horizontal": 0, "vertical": 0}},
        "puzzles": [
            {
                "id": 1,
                "title": "Path",
                "type": "logic",
                "color": "#FFA000",
                "position": [0, 0, -6],
                "facts": ["first", "second"],
                "connection": {
                    "start_node": 1,
                    "end_node": 3,
                    "nodes": [
                        {"id": 1, "label": "Start", "fixed": True, "position": [-1, 0, 0]},
                        {"id": 2, "label": "Middle", "position": [0, 0, 0]},
                        {"id": 3, "label": "End", "fixed": True, "position": [1, 0, 0]},
                    ],
                    "correct_sequence": [[1, 2], [2, 3]],
                },
            }
        ],
    }
    data.update(overrides)
    return data


