from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List

logger = logging.getLogger(__name__)


class GameListener:
    """Presentation hooks. Subclasses override only what they draw or play."""

    def on_cell_revealed(self, index: int, card_id: int) -> None:
        pass

    def on_cell_concealed(self, index: int) -> None:
        pass

    def on_cell_matched(self, index: int) -> None:
        pass

    def on_score_changed(self, score: int) -> None:
        pass

    def on_combo_changed(self, combo: int) -> None:
        pass

    def on_moves_changed(self, moves: int) -> None:
        pass

    def on_pairs_remaining_changed(self, pairs: int) -> None:
        pass

    def on_game_over(self, final_score: int, final_moves: int) -> None:
        pass


@dataclass(frozen=True)
class Event:
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {"event": self.name, **self.payload}


class EventChannel:
    """
    Outgoing event fan-out.

    Subscribed listeners are called synchronously; a listener that raises is
    logged and skipped. Every event is also queued (bounded) so a poller such
    as the HTTP layer can drain them later.
    """

    def __init__(self, maxlen: int = 512):
        self._listeners: List[GameListener] = []
        self._queue: Deque[Event] = deque(maxlen=maxlen)

    def subscribe(self, listener: GameListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: GameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def drain(self) -> List[Event]:
        out = list(self._queue)
        self._queue.clear()
        return out

    def _emit(self, name: str, **payload: Any) -> None:
        self._queue.append(Event(name, payload))
        hook = f"on_{name}"
        for listener in list(self._listeners):
            try:
                getattr(listener, hook)(*payload.values())
            except Exception:
                logger.exception("listener %r failed on %s", listener, name)

    def cell_revealed(self, index: int, card_id: int) -> None:
        self._emit("cell_revealed", index=index, card_id=card_id)

    def cell_concealed(self, index: int) -> None:
        self._emit("cell_concealed", index=index)

    def cell_matched(self, index: int) -> None:
        self._emit("cell_matched", index=index)

    def score_changed(self, score: int) -> None:
        self._emit("score_changed", score=score)

    def combo_changed(self, combo: int) -> None:
        self._emit("combo_changed", combo=combo)

    def moves_changed(self, moves: int) -> None:
        self._emit("moves_changed", moves=moves)

    def pairs_remaining_changed(self, pairs: int) -> None:
        self._emit("pairs_remaining_changed", pairs=pairs)

    def game_over(self, final_score: int, final_moves: int) -> None:
        self._emit("game_over", final_score=final_score, final_moves=final_moves)
