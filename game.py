from __future__ import annotations

# Facade module that re-exports the Runebreak core.
# Kept so the Flask app, tools and tests have one flat import point.
# Single-responsibility modules live under runebreak_core/*.

try:
    from .runebreak_core.board import CardCell, Coord, Grid  # type: ignore
    from .runebreak_core.config import LEVELS, GameConfig, level_size  # type: ignore
    from .runebreak_core.deck import Deck, shuffle_in_place, validate_dimensions  # type: ignore
    from .runebreak_core.engine import EngineState, MatchEngine, Resolution, RevealResult  # type: ignore
    from .runebreak_core.errors import (  # type: ignore
        AlreadyMatched,
        AlreadyRevealed,
        Busy,
        CorruptSave,
        InvalidCell,
        InvalidConfiguration,
        InvalidTransition,
        OutOfRange,
        PersistenceError,
        RejectedReveal,
        RunebreakError,
        SaveNotFound,
    )
    from .runebreak_core.events import Event, EventChannel, GameListener  # type: ignore
    from .runebreak_core.scheduler import ManualClock, Scheduler  # type: ignore
    from .runebreak_core.score import ScoreData, ScoreTracker  # type: ignore
    from .runebreak_core.session import GameSession  # type: ignore
    from .runebreak_core.state import SessionSnapshot, json_to_snapshot, snapshot_to_json  # type: ignore
    from .runebreak_core.storage import (  # type: ignore
        JsonFileGateway,
        MemoryGateway,
        PersistenceGateway,
        SqliteGateway,
        gateway_from_config,
    )
except ImportError:
    from runebreak_core.board import CardCell, Coord, Grid  # type: ignore
    from runebreak_core.config import LEVELS, GameConfig, level_size  # type: ignore
    from runebreak_core.deck import Deck, shuffle_in_place, validate_dimensions  # type: ignore
    from runebreak_core.engine import EngineState, MatchEngine, Resolution, RevealResult  # type: ignore
    from runebreak_core.errors import (  # type: ignore
        AlreadyMatched,
        AlreadyRevealed,
        Busy,
        CorruptSave,
        InvalidCell,
        InvalidConfiguration,
        InvalidTransition,
        OutOfRange,
        PersistenceError,
        RejectedReveal,
        RunebreakError,
        SaveNotFound,
    )
    from runebreak_core.events import Event, EventChannel, GameListener  # type: ignore
    from runebreak_core.scheduler import ManualClock, Scheduler  # type: ignore
    from runebreak_core.score import ScoreData, ScoreTracker  # type: ignore
    from runebreak_core.session import GameSession  # type: ignore
    from runebreak_core.state import SessionSnapshot, json_to_snapshot, snapshot_to_json  # type: ignore
    from runebreak_core.storage import (  # type: ignore
        JsonFileGateway,
        MemoryGateway,
        PersistenceGateway,
        SqliteGateway,
        gateway_from_config,
    )


def main() -> None:
    # CLI driver delegated to runebreak_core.cli
    try:
        from .runebreak_core.cli import main as _main  # type: ignore
    except ImportError:
        from runebreak_core.cli import main as _main  # type: ignore
    _main()


if __name__ == '__main__':
    main()
