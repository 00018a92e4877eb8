from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Tuple, TypeVar

from .errors import InvalidConfiguration

T = TypeVar("T")

# Grid sizes offered by the level picker, as (rows, cols).
LEVELS: Tuple[Tuple[int, int], ...] = (
    (2, 2),
    (2, 3),
    (4, 4),
    (4, 5),
    (5, 6),
)

DEFAULT_SAVE_PATH = os.path.join("data", "gamesave.json")


@dataclass(frozen=True)
class GameConfig:
    """Tunable game settings. Delays and the combo window are in seconds."""
    default_rows: int = 4
    default_cols: int = 4
    reveal_delay: float = 0.5
    mismatch_delay: float = 1.0
    match_points: int = 100
    combo_bonus: int = 50
    combo_window: float = 3.0
    save_path: str = DEFAULT_SAVE_PATH
    save_backend: str = "json"

    def __post_init__(self) -> None:
        if self.default_rows <= 0 or self.default_cols <= 0:
            raise InvalidConfiguration("default rows/cols must be positive")
        if (self.default_rows * self.default_cols) % 2 != 0:
            raise InvalidConfiguration("default grid must have an even number of cards")
        if self.reveal_delay < 0 or self.mismatch_delay < 0 or self.combo_window < 0:
            raise InvalidConfiguration("delays and combo window must not be negative")
        if self.save_backend not in ("json", "sqlite"):
            raise InvalidConfiguration(f"unknown save backend: {self.save_backend!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "GameConfig":
        """Builds a config from RUNEBREAK_* environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def _get(name: str, cast: Callable[[str], T], default: T) -> T:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return cast(raw.strip())
            except ValueError as e:
                raise InvalidConfiguration(f"{name}={raw!r}: {e}") from e

        return cls(
            default_rows=_get("RUNEBREAK_ROWS", int, defaults.default_rows),
            default_cols=_get("RUNEBREAK_COLS", int, defaults.default_cols),
            reveal_delay=_get("RUNEBREAK_REVEAL_DELAY", float, defaults.reveal_delay),
            mismatch_delay=_get("RUNEBREAK_MISMATCH_DELAY", float, defaults.mismatch_delay),
            match_points=_get("RUNEBREAK_MATCH_POINTS", int, defaults.match_points),
            combo_bonus=_get("RUNEBREAK_COMBO_BONUS", int, defaults.combo_bonus),
            combo_window=_get("RUNEBREAK_COMBO_WINDOW", float, defaults.combo_window),
            save_path=_get("RUNEBREAK_SAVE", str, defaults.save_path),
            save_backend=_get("RUNEBREAK_SAVE_BACKEND", str.lower, defaults.save_backend),
        )


def level_size(index: int) -> Tuple[int, int]:
    if not 0 <= index < len(LEVELS):
        raise InvalidConfiguration(f"unknown level {index}; expected 0..{len(LEVELS) - 1}")
    return LEVELS[index]
