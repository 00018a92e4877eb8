from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .deck import CardId, validate_dimensions
from .errors import (
    AlreadyMatched,
    AlreadyRevealed,
    InvalidConfiguration,
    InvalidTransition,
    OutOfRange,
)

Coord = Tuple[int, int]  # (row, col)


@dataclass(frozen=True)
class CardCell:
    """One card on the grid. A matched card is always face-up."""
    card_id: CardId
    revealed: bool = False
    matched: bool = False


class Grid:
    """
    Row-major rows x cols collection of CardCell.

    Rep:
      - len(cells) == rows * cols, rows * cols even
      - every id present is held by exactly two cells
      - matched => revealed, and once matched a cell never changes again
    """

    def __init__(self, rows: int, cols: int, ids: Sequence[CardId], matched: Optional[Sequence[bool]] = None):
        validate_dimensions(rows, cols)
        if len(ids) != rows * cols:
            raise InvalidConfiguration(f"expected {rows * cols} ids for a {rows}x{cols} grid, got {len(ids)}")
        if matched is not None and len(matched) != len(ids):
            raise InvalidConfiguration("matched flags and ids differ in length")
        counts = Counter(ids)
        odd = sorted(cid for cid, n in counts.items() if n != 2)
        if odd:
            raise InvalidConfiguration(f"ids must appear exactly twice; offending ids: {odd}")

        self._rows = rows
        self._cols = cols
        flags = list(matched) if matched is not None else [False] * len(ids)
        self._cells: List[CardCell] = [
            CardCell(card_id=int(cid), revealed=bool(m), matched=bool(m))
            for cid, m in zip(ids, flags)
        ]
        self._check_rep()

    def _check_rep(self) -> None:
        assert len(self._cells) == self._rows * self._cols
        by_id = {}
        for cell in self._cells:
            if cell.matched:
                assert cell.revealed
            by_id.setdefault(cell.card_id, []).append(cell.matched)
        for flags in by_id.values():
            # A pair is either fully matched or not matched at all.
            if any(flags) and not all(flags):
                raise InvalidConfiguration("a pair is only half matched")

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def cols(self) -> int:
        return self._cols

    @property
    def cells(self) -> Tuple[CardCell, ...]:
        return tuple(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[CardCell]:
        return iter(tuple(self._cells))

    def index(self, r: int, c: int) -> int:
        """Calculates the 1D index for a given row and column."""
        if not (0 <= r < self._rows and 0 <= c < self._cols):
            raise OutOfRange(f"({r}, {c}) is outside a {self._rows}x{self._cols} grid")
        return r * self._cols + c

    def coord(self, index: int) -> Coord:
        self._validate_index(index)
        return divmod(index, self._cols)

    def cell(self, index: int) -> CardCell:
        self._validate_index(index)
        return self._cells[index]

    def card_ids(self) -> List[CardId]:
        return [cell.card_id for cell in self._cells]

    def matched_flags(self) -> List[bool]:
        return [cell.matched for cell in self._cells]

    def matched_count(self) -> int:
        return sum(1 for cell in self._cells if cell.matched)

    def remaining_pairs(self) -> int:
        return (len(self._cells) - self.matched_count()) // 2

    def revealed_unmatched(self) -> List[int]:
        return [i for i, cell in enumerate(self._cells) if cell.revealed and not cell.matched]

    def reveal(self, index: int) -> CardId:
        """Turns a card face-up and returns its id."""
        self._validate_index(index)
        cell = self._cells[index]
        if cell.matched:
            raise AlreadyMatched(f"cell {index} is already matched")
        if cell.revealed:
            raise AlreadyRevealed(f"cell {index} is already face up")
        self._cells[index] = replace(cell, revealed=True)
        return cell.card_id

    def conceal(self, index: int) -> None:
        self._validate_index(index)
        cell = self._cells[index]
        if cell.matched:
            raise InvalidTransition(f"cannot conceal matched cell {index}")
        if not cell.revealed:
            return
        self._cells[index] = replace(cell, revealed=False)

    def mark_matched(self, index_a: int, index_b: int) -> None:
        """Marks two face-up cards holding the same id as permanently matched."""
        self._validate_index(index_a)
        self._validate_index(index_b)
        if index_a == index_b:
            raise InvalidTransition("a cell cannot be matched with itself")
        a = self._cells[index_a]
        b = self._cells[index_b]
        if a.matched or b.matched:
            raise InvalidTransition("cells are already matched")
        if not a.revealed or not b.revealed:
            raise InvalidTransition("both cells must be face up to match")
        if a.card_id != b.card_id:
            raise InvalidTransition(f"ids differ: {a.card_id} != {b.card_id}")
        self._cells[index_a] = replace(a, matched=True)
        self._cells[index_b] = replace(b, matched=True)
        self._check_rep()

    def pretty(self, indices: Iterable[int] = ()) -> str:
        """Text rendering: '##' face-down, the id face-up, brackets around matched cards."""
        width = max(2, len(str(max(self.card_ids()))))
        highlight = set(indices)
        lines: List[str] = []
        for r in range(self._rows):
            row: List[str] = []
            for c in range(self._cols):
                i = r * self._cols + c
                cell = self._cells[i]
                if cell.matched:
                    text = f"[{cell.card_id:>{width}}]"
                elif cell.revealed:
                    mark = "*" if i in highlight else " "
                    text = f"{mark}{cell.card_id:>{width}}{mark}"
                else:
                    text = " " + "#" * width + " "
                row.append(text)
            lines.append(" ".join(row))
        return "\n".join(lines)

    def _validate_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._cells):
            raise OutOfRange(f"cell index {index!r} out of range 0..{len(self._cells) - 1}")
