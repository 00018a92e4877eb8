from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .board import Grid
from .deck import CardId
from .errors import Busy, InvalidTransition
from .events import EventChannel
from .score import ScoreTracker

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    IDLE = "idle"
    ONE_SELECTED = "one_selected"
    RESOLVING = "resolving"


@dataclass(frozen=True)
class RevealResult:
    index: int
    card_id: CardId
    pair_complete: bool  # True when this reveal was the second pick of a turn


@dataclass(frozen=True)
class Resolution:
    first: int
    second: int
    matched: bool
    points: int = 0
    remaining_pairs: int = 0

    @property
    def game_over(self) -> bool:
        return self.matched and self.remaining_pairs == 0


class MatchEngine:
    """
    Turn state machine over a Grid.

    IDLE --reveal--> ONE_SELECTED --reveal--> RESOLVING
    RESOLVING --resolve(match)--> IDLE
    RESOLVING --resolve(mismatch)--> RESOLVING --conceal_mismatch--> IDLE

    The settle pause before resolve() and the pause before concealing a
    mismatch belong to the caller; every method here acts immediately.
    """

    def __init__(self, grid: Grid, score: ScoreTracker, events: Optional[EventChannel] = None):
        self.grid = grid
        self.score = score
        self._events = events if events is not None else EventChannel()
        self._selection: List[int] = []
        self._awaiting_conceal = False

    @property
    def state(self) -> EngineState:
        if len(self._selection) == 2:
            return EngineState.RESOLVING
        if len(self._selection) == 1:
            return EngineState.ONE_SELECTED
        return EngineState.IDLE

    @property
    def selection(self) -> Tuple[int, ...]:
        return tuple(self._selection)

    @property
    def remaining_pairs(self) -> int:
        return self.grid.remaining_pairs()

    @property
    def awaiting_conceal(self) -> bool:
        return self._awaiting_conceal

    def request_reveal(self, index: int) -> RevealResult:
        """Turns a card face-up. Raises Busy while resolving, InvalidCell for unusable cells."""
        if self.state is EngineState.RESOLVING:
            raise Busy("two cards are already waiting to be resolved")
        card_id = self.grid.reveal(index)
        self._selection.append(index)
        self._events.cell_revealed(index, card_id)

        pair_complete = len(self._selection) == 2
        if pair_complete:
            self.score.record_move()
        return RevealResult(index=index, card_id=card_id, pair_complete=pair_complete)

    def resolve(self, now: float) -> Resolution:
        """Compares the two selected cards and applies the outcome."""
        if self.state is not EngineState.RESOLVING or self._awaiting_conceal:
            raise InvalidTransition("no pair is waiting to be resolved")
        first, second = self._selection
        if self.grid.cell(first).card_id != self.grid.cell(second).card_id:
            self.score.break_combo()
            self._awaiting_conceal = True
            logger.debug("mismatch %d/%d", first, second)
            return Resolution(first, second, matched=False, remaining_pairs=self.remaining_pairs)

        self.grid.mark_matched(first, second)
        self._events.cell_matched(first)
        self._events.cell_matched(second)
        points = self.score.record_match(now)
        self._selection.clear()
        remaining = self.remaining_pairs
        self._events.pairs_remaining_changed(remaining)
        logger.debug("match %d/%d (+%d), %d pairs left", first, second, points, remaining)
        return Resolution(first, second, matched=True, points=points, remaining_pairs=remaining)

    def conceal_mismatch(self) -> Tuple[int, int]:
        """Turns a mismatched pair face-down again and returns to IDLE."""
        if not self._awaiting_conceal:
            raise InvalidTransition("no mismatched pair to conceal")
        first, second = self._selection
        for index in (first, second):
            self.grid.conceal(index)
            self._events.cell_concealed(index)
        self._selection.clear()
        self._awaiting_conceal = False
        return first, second
