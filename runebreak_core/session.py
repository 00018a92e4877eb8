from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .board import Grid
from .config import GameConfig, level_size
from .deck import Deck
from .engine import EngineState, MatchEngine, RevealResult
from .errors import (
    Busy,
    CorruptSave,
    InvalidTransition,
    PersistenceError,
    RejectedReveal,
    SaveNotFound,
)
from .events import EventChannel
from .scheduler import Clock, Scheduler
from .score import ScoreTracker
from .state import SessionSnapshot
from .storage import MemoryGateway, PersistenceGateway

logger = logging.getLogger(__name__)


class GameSession:
    """
    Owns one game from deal to game over: the grid, the turn engine, the
    score, the delayed resolutions and the save slot.

    Delayed work is queued on `scheduler` and only runs when the owner calls
    tick(). Every queued callback carries the epoch it was scheduled in;
    starting or restoring a game bumps the epoch, so a resolution left over
    from a replaced grid is dropped instead of applied.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        gateway: Optional[PersistenceGateway] = None,
        deck: Optional[Deck] = None,
        clock: Optional[Clock] = None,
        events: Optional[EventChannel] = None,
    ):
        self.config = config if config is not None else GameConfig()
        self.gateway = gateway if gateway is not None else MemoryGateway()
        self.deck = deck if deck is not None else Deck()
        self.events = events if events is not None else EventChannel()
        self.scheduler = Scheduler(clock)
        self.score = ScoreTracker(
            match_points=self.config.match_points,
            combo_bonus=self.config.combo_bonus,
            combo_window=self.config.combo_window,
            events=self.events,
        )
        self.grid: Optional[Grid] = None
        self.engine: Optional[MatchEngine] = None
        self.active = False
        self.epoch = 0
        self.paused = False
        self._paused_at = 0.0
        self._elapsed = 0.0
        self._last_tick = self.scheduler.now()

    # ---------- queries ----------

    @property
    def remaining_pairs(self) -> int:
        return self.grid.remaining_pairs() if self.grid is not None else 0

    @property
    def state(self) -> EngineState:
        return self.engine.state if self.engine is not None else EngineState.IDLE

    @property
    def elapsed_seconds(self) -> float:
        self._accrue()
        return self._elapsed

    def view(self) -> Dict[str, Any]:
        """JSON-ready picture of what a player can see. Face-down cards hide their id."""
        cells: List[Dict[str, Any]] = []
        if self.grid is not None:
            for cell in self.grid:
                cells.append({
                    "id": cell.card_id if cell.revealed else None,
                    "revealed": cell.revealed,
                    "matched": cell.matched,
                })
        return {
            "rows": self.grid.rows if self.grid is not None else 0,
            "cols": self.grid.cols if self.grid is not None else 0,
            "cells": cells,
            "score": self.score.score,
            "combo": self.score.combo,
            "moves": self.score.moves,
            "matches": self.score.matches,
            "pairsRemaining": self.remaining_pairs,
            "state": self.state.value,
            "active": self.active,
            "paused": self.paused,
            "elapsedSeconds": round(self.elapsed_seconds, 3),
        }

    # ---------- lifecycle ----------

    def new_game(self, rows: int, cols: int) -> None:
        ids = self.deck.for_grid(rows, cols)
        grid = Grid(rows, cols, ids)
        self._install(grid)
        self.score.reset()
        self._elapsed = 0.0
        self.active = True
        self.events.pairs_remaining_changed(self.remaining_pairs)
        logger.info("new %dx%d game (%d pairs), epoch %d", rows, cols, self.remaining_pairs, self.epoch)

    def restart_game(self) -> None:
        """Drops any save and deals a fresh game at the current size."""
        self._delete_save()
        if self.grid is not None:
            self.new_game(self.grid.rows, self.grid.cols)
        else:
            self.new_game(self.config.default_rows, self.config.default_cols)

    def select_level(self, index: int) -> None:
        rows, cols = level_size(index)
        self.new_game(rows, cols)

    def boot(self) -> bool:
        """Resumes the saved game if there is a usable one, otherwise deals a default game.

        Returns True when a save was restored.
        """
        try:
            if self.gateway.exists():
                self.restore(self.gateway.load())
                return True
        except (CorruptSave, SaveNotFound, PersistenceError) as e:
            logger.warning("could not resume saved game, starting fresh: %s", e)
        self.new_game(self.config.default_rows, self.config.default_cols)
        return False

    def tick(self) -> int:
        """Runs due delayed resolutions and accrues play time. Returns callbacks run.

        Does nothing while paused: pending resolutions wait for the resume.
        """
        self._accrue()
        if self.paused:
            return 0
        return self.scheduler.run_due()

    # ---------- input ----------

    def handle_reveal(self, index: int) -> RevealResult:
        """Reveals a card. Raises a RejectedReveal subclass without changing state."""
        if not self.active or self.engine is None:
            raise RejectedReveal("no game in progress")
        if self.paused:
            raise RejectedReveal("game is paused")
        self._accrue()
        result = self.engine.request_reveal(index)
        if result.pair_complete:
            self.scheduler.call_later(self.config.reveal_delay, self._resolve, self.epoch)
        return result

    def request_reveal(self, index: int) -> bool:
        """Input-surface wrapper: rejected reveals are logged and reported as False."""
        try:
            self.handle_reveal(index)
        except Busy:
            logger.debug("reveal %r ignored while resolving", index)
            return False
        except RejectedReveal as e:
            logger.info("reveal %r rejected: %s", index, e)
            return False
        return True

    # ---------- persistence ----------

    def save(self) -> SessionSnapshot:
        if not self.active or self.grid is None:
            raise InvalidTransition("no game in progress to save")
        return SessionSnapshot.capture(self.grid, self.score.data(), self.elapsed_seconds)

    def save_now(self) -> bool:
        """Writes the current game to the save slot. A failed write leaves the live game untouched."""
        if not self.active:
            return False
        snapshot = self.save()
        try:
            self.gateway.save(snapshot)
        except PersistenceError as e:
            logger.error("save failed, game continues in memory: %s", e)
            return False
        return True

    def restore(self, snapshot: SessionSnapshot) -> None:
        """Rebuilds the game exactly as saved. Raises CorruptSave and leaves the current game alone."""
        if snapshot is None:
            raise CorruptSave("no snapshot")
        snapshot.validate()
        grid = Grid(snapshot.rows, snapshot.cols, snapshot.ids, snapshot.matched)
        if grid.matched_count() != 2 * snapshot.score.matches:
            raise CorruptSave(
                f"{grid.matched_count()} matched cells but {snapshot.score.matches} matches recorded"
            )
        if grid.remaining_pairs() == 0:
            raise CorruptSave("snapshot holds a finished game")

        self._install(grid)
        self.score.load(snapshot.score)
        self._elapsed = snapshot.elapsed_seconds
        self.active = True
        self.events.pairs_remaining_changed(self.remaining_pairs)
        logger.info(
            "restored %dx%d game: %d pairs left, score %d, epoch %d",
            grid.rows, grid.cols, self.remaining_pairs, self.score.score, self.epoch,
        )

    # ---------- platform hooks ----------

    def on_app_pause(self, paused: bool) -> None:
        """Suspends or resumes play. Paused time counts neither as play time nor toward pending delays."""
        now = self.scheduler.now()
        if paused:
            if self.paused:
                return
            if self.active:
                self.save_now()
            self._accrue()
            self.paused = True
            self._paused_at = now
            return
        if self.paused:
            gap = max(0.0, now - self._paused_at)
            self.scheduler.postpone(gap)
            # keep the combo window measured in play time
            self.score.last_match_time += gap
            self.paused = False
            logger.debug("resumed after %.1fs pause", gap)
        self._last_tick = now

    def on_app_quit(self) -> None:
        if self.active:
            self.save_now()

    # ---------- internals ----------

    def _install(self, grid: Grid) -> None:
        self.epoch += 1
        dropped = self.scheduler.cancel_all()
        if dropped:
            logger.debug("dropped %d pending callbacks from epoch %d", dropped, self.epoch - 1)
        self.grid = grid
        self.engine = MatchEngine(grid, self.score, self.events)
        self.paused = False
        self._last_tick = self.scheduler.now()

    def _resolve(self, epoch: int) -> None:
        if epoch != self.epoch or self.engine is None:
            logger.debug("stale resolution from epoch %d ignored", epoch)
            return
        res = self.engine.resolve(self.scheduler.now())
        if not res.matched:
            self.scheduler.call_later(self.config.mismatch_delay, self._conceal, epoch)
        elif res.game_over:
            self._finish()

    def _conceal(self, epoch: int) -> None:
        if epoch != self.epoch or self.engine is None:
            logger.debug("stale conceal from epoch %d ignored", epoch)
            return
        self.engine.conceal_mismatch()

    def _finish(self) -> None:
        self._accrue()
        self.active = False
        logger.info(
            "game over: score %d, moves %d, %.1fs",
            self.score.score, self.score.moves, self._elapsed,
        )
        self.events.game_over(self.score.score, self.score.moves)
        self._delete_save()

    def _delete_save(self) -> None:
        try:
            self.gateway.delete()
        except PersistenceError as e:
            logger.warning("could not delete save: %s", e)

    def _accrue(self) -> None:
        now = self.scheduler.now()
        if self.active and not self.paused:
            self._elapsed += max(0.0, now - self._last_tick)
        self._last_tick = now
