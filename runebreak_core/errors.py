from __future__ import annotations


class RunebreakError(Exception):
    """Base class for every error raised by the game core."""


class InvalidConfiguration(RunebreakError, ValueError):
    """Odd cell count, non-positive pair count, unknown level or bad setting."""


class InvalidTransition(RunebreakError, ValueError):
    """A card state change that the rules do not allow."""


class RejectedReveal(RunebreakError, ValueError):
    """A reveal request that was refused without changing any state."""


class Busy(RejectedReveal):
    """Two cards are already waiting to be resolved."""


class InvalidCell(RejectedReveal):
    """The target cell cannot be revealed."""


class OutOfRange(InvalidCell):
    pass


class AlreadyMatched(InvalidCell):
    pass


class AlreadyRevealed(InvalidCell):
    pass


class CorruptSave(RunebreakError, ValueError):
    """A persisted snapshot failed integrity checks."""


class SaveNotFound(RunebreakError, LookupError):
    pass


class PersistenceError(RunebreakError, OSError):
    """The backing store could not be read or written."""
