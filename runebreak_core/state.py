from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .board import Grid
from .errors import CorruptSave
from .score import ScoreData

SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything needed to resume a game: card ids, matched flags, score and play time."""
    rows: int
    cols: int
    ids: Tuple[int, ...]  # row-major, length == rows * cols
    matched: Tuple[bool, ...]
    score: ScoreData
    elapsed_seconds: float = 0.0

    @classmethod
    def capture(cls, grid: Grid, score: ScoreData, elapsed_seconds: float) -> "SessionSnapshot":
        return cls(
            rows=grid.rows,
            cols=grid.cols,
            ids=tuple(grid.card_ids()),
            matched=tuple(grid.matched_flags()),
            score=score,
            elapsed_seconds=float(elapsed_seconds),
        )

    def validate(self) -> None:
        """Raises CorruptSave unless the snapshot can rebuild a consistent grid."""
        if self.rows <= 0 or self.cols <= 0:
            raise CorruptSave(f"bad grid size {self.rows}x{self.cols}")
        if len(self.ids) != self.rows * self.cols or len(self.matched) != len(self.ids):
            raise CorruptSave(
                f"grid {self.rows}x{self.cols} has {len(self.ids)} ids and {len(self.matched)} flags"
            )
        if min(self.score.score, self.score.moves, self.score.matches) < 0:
            raise CorruptSave("negative score fields")
        if not math.isfinite(self.elapsed_seconds) or self.elapsed_seconds < 0:
            raise CorruptSave(f"bad elapsed time {self.elapsed_seconds!r}")
        try:
            Grid(self.rows, self.cols, self.ids, self.matched)
        except ValueError as e:
            raise CorruptSave(f"grid rejected: {e}") from e


def snapshot_to_json(s: SessionSnapshot) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "grid": {
            "rows": int(s.rows),
            "cols": int(s.cols),
            "cards": [{"id": int(cid), "matched": bool(m)} for cid, m in zip(s.ids, s.matched)],
        },
        "score": {"score": s.score.score, "moves": s.score.moves, "matches": s.score.matches},
        "elapsedSeconds": float(s.elapsed_seconds),
    }


def _int_field(value: Any, what: str) -> int:
    # bool is an int subclass; JSON true/false is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        raise CorruptSave(f"{what} must be an integer, got {value!r}")
    return value


def _bool_field(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise CorruptSave(f"{what} must be true or false, got {value!r}")
    return value


def _number_field(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CorruptSave(f"{what} must be a number, got {value!r}")
    return float(value)


def json_to_snapshot(obj: Any) -> SessionSnapshot:
    """Parses a snapshot document. Any structural problem becomes CorruptSave."""
    if not isinstance(obj, dict):
        raise CorruptSave("snapshot must be a JSON object")
    g = obj.get("grid")
    if not isinstance(g, dict):
        raise CorruptSave("snapshot has no grid")
    try:
        cards = g["cards"]
        if not isinstance(cards, list):
            raise CorruptSave("grid.cards must be a list")
        sc = obj.get("score") or {}
        snapshot = SessionSnapshot(
            rows=_int_field(g["rows"], "grid.rows"),
            cols=_int_field(g["cols"], "grid.cols"),
            ids=tuple(_int_field(c["id"], "card id") for c in cards),
            matched=tuple(_bool_field(c.get("matched", False), "card matched") for c in cards),
            score=ScoreData(
                score=_int_field(sc.get("score", 0), "score.score"),
                moves=_int_field(sc.get("moves", 0), "score.moves"),
                matches=_int_field(sc.get("matches", 0), "score.matches"),
            ),
            elapsed_seconds=_number_field(obj.get("elapsedSeconds", 0.0), "elapsedSeconds"),
        )
    except CorruptSave:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise CorruptSave(f"bad snapshot: {e}") from e
    snapshot.validate()
    return snapshot
