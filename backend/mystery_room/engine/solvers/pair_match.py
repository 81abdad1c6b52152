"""
Pair-match (memory) puzzle solver.

Flow of one turn:
    flip_card(a)         -> flipped = [a]
    flip_card(b)         -> flipped = [a, b], locked for resolution
    + settle_delay       -> compare symbols
        equal            -> both matched, count += 1, unlock
        different        -> + mismatch_delay -> both face-down, unlock

Flips during the lock window are rejected, never queued.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from pydantic import BaseModel

from mystery_room.engine.notices import NoticeSlot
from mystery_room.engine.solvers.base import SolverBase, percent
from mystery_room.models.event import PuzzleType, RejectionCode
from mystery_room.models.state import CardView, NoticeKind, PairMatchView
from mystery_room.models.validation import (
    ActionResult,
    accepted_result,
    rejected_result,
)

if TYPE_CHECKING:
    from mystery_room.config import RoomSettings
    from mystery_room.engine.protocols import ProgressSink
    from mystery_room.engine.scheduler import DeferredScheduler
    from mystery_room.models.room import Puzzle

logger = logging.getLogger(__name__)


class Card(BaseModel):
    """One dealt card"""
    symbol: str
    label: str = ""
    color: str = "#ffffff"
    matched: bool = False


def deal(puzzle: "Puzzle", rng: random.Random) -> list[Card]:
    """Two cards per symbol, shuffled."""
    cards = [
        Card(symbol=s.symbol, label=s.label, color=s.color)
        for s in puzzle.pair_match_layout().symbols
        for _ in range(2)
    ]
    rng.shuffle(cards)
    return cards


class PairMatchSolver(SolverBase):
    """State machine for the pair-match puzzle.

    Attributes:
        cards: The shuffled deck
        flipped: Indices of face-up unmatched cards (at most two)
        locked_for_resolution: True between the second flip and the outcome
        matched_symbols: Symbols matched so far, in match order
    """

    puzzle_type = PuzzleType.PAIR_MATCH

    def __init__(
        self,
        puzzle: "Puzzle",
        scheduler: "DeferredScheduler",
        settings: "RoomSettings",
        sink: "ProgressSink | None" = None,
        session_token: int | None = None,
        rng: random.Random | None = None,
        seed: int | None = None,
    ):
        super().__init__(puzzle, scheduler, settings, sink, session_token)
        self.cards = deal(puzzle, rng or random.Random(seed))
        self.flipped: list[int] = []
        self.locked_for_resolution = False
        self.matched_symbols: list[str] = []
        self.celebration = NoticeSlot(
            scheduler, owner=f"{self.puzzle_type.value}:{puzzle.id}"
        )

    @property
    def matched_pair_count(self) -> int:
        return len(self.matched_symbols)

    @property
    def total_pair_count(self) -> int:
        return len(self.cards) // 2

    @property
    def solved_count(self) -> int:
        return self.matched_pair_count

    @property
    def total_steps(self) -> int:
        return self.total_pair_count

    def flip_card(self, index: int) -> ActionResult:
        """Turn a card face-up.

        Args:
            index: Position of the card in the deck

        Returns:
            ActionResult; context["resolving"] is True when this flip
            completed a pair and the comparison has been scheduled
        """
        inactive = self._inactive()
        if inactive:
            return inactive

        if self.locked_for_resolution:
            return rejected_result(
                RejectionCode.RESOLUTION_LOCKED,
                "Two cards are already being compared.",
                index=index,
            )
        if not 0 <= index < len(self.cards):
            return rejected_result(
                RejectionCode.CARD_OUT_OF_RANGE,
                f"There is no card #{index}.",
                index=index,
            )
        if self.cards[index].matched:
            return rejected_result(
                RejectionCode.CARD_MATCHED,
                "That card is already matched.",
                index=index,
            )
        if index in self.flipped:
            return rejected_result(
                RejectionCode.CARD_FLIPPED,
                "That card is already face-up.",
                index=index,
            )

        self.flipped.append(index)
        if len(self.flipped) < 2:
            return accepted_result(index=index, resolving=False)

        self.locked_for_resolution = True
        self._defer(self.settings.settle_delay, self._resolve, "settle")
        return accepted_result(index=index, resolving=True, pair=list(self.flipped))

    def _resolve(self) -> None:
        first, second = self.flipped
        a, b = self.cards[first], self.cards[second]

        if a.symbol != b.symbol:
            logger.debug(f"Pair-match {self.puzzle.id}: cards {first}/{second} differ")
            self._defer(self.settings.mismatch_delay, self._reset_pair, "mismatch")
            return

        a.matched = True
        b.matched = True
        self.matched_symbols.append(a.symbol)
        self.flipped = []
        self.locked_for_resolution = False
        logger.info(
            f"Pair-match {self.puzzle.id}: matched {a.symbol} "
            f"({self.matched_pair_count}/{self.total_pair_count})"
        )

        message = "All pairs found!" if self.is_solved else f"Matched {a.label or a.symbol}!"
        self.celebration.post(
            message,
            NoticeKind.CELEBRATION,
            self.settings.celebration_ttl,
            subject=[first, second],
        )
        self._report_if_changed()

    def _reset_pair(self) -> None:
        self.flipped = []
        self.locked_for_resolution = False

    def _drop_pending(self) -> None:
        self._reset_pair()
        self.celebration.clear()

    def view(self) -> PairMatchView:
        cards = []
        for i, card in enumerate(self.cards):
            visible = card.matched or i in self.flipped
            cards.append(
                CardView(
                    index=i,
                    symbol=card.symbol if visible else None,
                    label=card.label if visible else None,
                    matched=card.matched,
                    face_up=visible,
                )
            )
        return PairMatchView(
            cards=cards,
            flipped=list(self.flipped),
            locked_for_resolution=self.locked_for_resolution,
            matched_pair_count=self.matched_pair_count,
            total_pair_count=self.total_pair_count,
            progress_percent=percent(self.matched_pair_count, self.total_pair_count),
            solved=self.is_solved,
            celebration=self.celebration.current,
        )
