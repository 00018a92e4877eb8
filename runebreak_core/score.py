from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .events import EventChannel


@dataclass(frozen=True)
class ScoreData:
    """The persisted part of the score. Combo is not saved."""
    score: int = 0
    moves: int = 0
    matches: int = 0


class ScoreTracker:
    """Moves, matches, score and the time-windowed combo counter."""

    def __init__(
        self,
        match_points: int = 100,
        combo_bonus: int = 50,
        combo_window: float = 3.0,
        events: Optional[EventChannel] = None,
    ):
        self.match_points = match_points
        self.combo_bonus = combo_bonus
        self.combo_window = combo_window
        self._events = events if events is not None else EventChannel()
        self.score = 0
        self.moves = 0
        self.matches = 0
        self.combo = 0
        self.last_match_time = 0.0

    def reset(self) -> None:
        self.score = 0
        self.moves = 0
        self.matches = 0
        self.combo = 0
        self.last_match_time = 0.0
        self._events.score_changed(self.score)
        self._events.combo_changed(self.combo)
        self._events.moves_changed(self.moves)

    def record_move(self) -> None:
        self.moves += 1
        self._events.moves_changed(self.moves)

    def record_match(self, now: float) -> int:
        """Scores a match made at time `now` and returns the points added."""
        if self.combo > 0 and now - self.last_match_time <= self.combo_window:
            self.combo += 1
        else:
            self.combo = 1
        self.last_match_time = now
        self.matches += 1

        points = self.match_points + (self.combo - 1) * self.combo_bonus
        self.score += points
        self._events.score_changed(self.score)
        self._events.combo_changed(self.combo)
        return points

    def break_combo(self) -> None:
        if self.combo > 0:
            self.combo = 0
            self._events.combo_changed(self.combo)

    def data(self) -> ScoreData:
        return ScoreData(score=self.score, moves=self.moves, matches=self.matches)

    def load(self, data: ScoreData) -> None:
        self.score = data.score
        self.moves = data.moves
        self.matches = data.matches
        self.combo = 0
        self.last_match_time = 0.0
        self._events.score_changed(self.score)
        self._events.moves_changed(self.moves)
        self._events.combo_changed(self.combo)
