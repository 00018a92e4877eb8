from __future__ import annotations

import random
from typing import List, Optional

from .errors import InvalidConfiguration

CardId = int


def shuffle_in_place(items: List[CardId], rng: random.Random) -> None:
    """Fisher-Yates: walk down from the last index, swapping with a uniform pick in [0, i]."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


class Deck:
    """Deals the shuffled card ids for a grid. Each id in [0, pair_count) appears twice."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random(seed)

    def generate(self, pair_count: int) -> List[CardId]:
        if pair_count <= 0:
            raise InvalidConfiguration(f"pair count must be positive, got {pair_count}")
        ids: List[CardId] = []
        for i in range(pair_count):
            ids.append(i)
            ids.append(i)
        shuffle_in_place(ids, self._rng)
        return ids

    def for_grid(self, rows: int, cols: int) -> List[CardId]:
        """Ids for a rows x cols grid; the cell count must be even."""
        validate_dimensions(rows, cols)
        return self.generate((rows * cols) // 2)


def validate_dimensions(rows: int, cols: int) -> None:
    if rows <= 0 or cols <= 0:
        raise InvalidConfiguration("rows/cols must be positive")
    if (rows * cols) % 2 != 0:
        raise InvalidConfiguration(f"a {rows}x{cols} grid has an odd number of cards")
