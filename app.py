from __future__ import annotations

import logging
import os
import sys
from threading import RLock
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

# Ensure package imports work when executed directly from repo root or as module
if __package__ in (None, ""):
    sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

try:
    from .game import (  # type: ignore
        Busy,
        GameConfig,
        GameSession,
        InvalidConfiguration,
        LEVELS,
        RejectedReveal,
        gateway_from_config,
    )
except ImportError:
    from game import (  # type: ignore
        Busy,
        GameConfig,
        GameSession,
        InvalidConfiguration,
        LEVELS,
        RejectedReveal,
        gateway_from_config,
    )

app = Flask(__name__)

# One local player, one save slot: a single in-memory session serves every request.
# The dev server is threaded, so requests take the lock before touching it.
_LOCK = RLock()
SESSION: Optional[GameSession] = None


def create_session(config: Optional[GameConfig] = None) -> GameSession:
    cfg = config if config is not None else GameConfig.from_env()
    session = GameSession(config=cfg, gateway=gateway_from_config(cfg))
    session.boot()
    return session


def set_session(session: Optional[GameSession]) -> None:
    global SESSION
    with _LOCK:
        SESSION = session


def _session() -> GameSession:
    global SESSION
    if SESSION is None:
        SESSION = create_session()
    SESSION.tick()
    return SESSION


def _error(message: str, status: int, **extra: Any):
    body: Dict[str, Any] = {"ok": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def _json_body() -> Optional[Dict[str, Any]]:
    """Request JSON as a dict. A missing or unparsable body reads as {}; any other JSON type gives None."""
    body = request.get_json(force=True, silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


def _ok(session: GameSession, **extra: Any):
    body: Dict[str, Any] = {"ok": True}
    body.update(extra)
    body["state"] = session.view()
    return jsonify(body)


@app.get("/api/state")
def api_state() -> Any:
    with _LOCK:
        return _ok(_session())


@app.post("/api/new")
def api_new() -> Any:
    body = _json_body()
    if body is None:
        return _error("request body must be a JSON object", 400)
    with _LOCK:
        session = _session()
        try:
            if "level" in body:
                session.select_level(int(body["level"]))
            else:
                rows = int(body.get("rows", session.config.default_rows))
                cols = int(body.get("cols", session.config.default_cols))
                session.new_game(rows, cols)
        except (TypeError, ValueError) as e:
            # InvalidConfiguration is a ValueError
            return _error(f"bad grid: {e}", 400)
        app.logger.info("new game %dx%d", session.grid.rows, session.grid.cols)
        return _ok(session)


@app.post("/api/restart")
def api_restart() -> Any:
    with _LOCK:
        session = _session()
        session.restart_game()
        return _ok(session)


@app.post("/api/reveal")
def api_reveal() -> Any:
    body = _json_body()
    if body is None:
        return _error("request body must be a JSON object", 400)
    with _LOCK:
        session = _session()
        try:
            if "index" in body:
                index = int(body["index"])
            elif session.grid is not None:
                index = session.grid.index(int(body["row"]), int(body["col"]))
            else:
                return _error("no game in progress", 409)
        except RejectedReveal as e:
            return _error(str(e), 409)
        except (KeyError, TypeError, ValueError):
            return _error("index or row/col required", 400)
        try:
            result = session.handle_reveal(index)
        except Busy as e:
            return _error(str(e), 409, busy=True)
        except RejectedReveal as e:
            return _error(str(e), 409)
        return _ok(
            session,
            revealed={"index": result.index, "id": result.card_id},
            pairComplete=result.pair_complete,
        )


@app.post("/api/save")
def api_save() -> Any:
    with _LOCK:
        session = _session()
        if not session.active:
            return _error("no game in progress", 409)
        if not session.save_now():
            return _error("save failed; game continues in memory", 500)
        return _ok(session, saved=True)


@app.post("/api/suspend")
def api_suspend() -> Any:
    body = _json_body()
    if body is None:
        return _error("request body must be a JSON object", 400)
    with _LOCK:
        session = _session()
        session.on_app_pause(bool(body.get("paused", True)))
        return _ok(session)


@app.get("/api/events")
def api_events() -> Any:
    with _LOCK:
        session = _session()
        events = [e.to_json() for e in session.events.drain()]
        return jsonify({"ok": True, "events": events})


@app.get("/api/config")
def api_config() -> Any:
    with _LOCK:
        cfg = _session().config
        return jsonify({
            "ok": True,
            "levels": [[r, c] for r, c in LEVELS],
            "revealDelay": cfg.reveal_delay,
            "mismatchDelay": cfg.mismatch_delay,
            "comboWindow": cfg.combo_window,
        })


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("RUNEBREAK_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    try:
        set_session(create_session())
    except InvalidConfiguration as e:
        sys.exit(f"error: {e}")
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    try:
        app.run(host="127.0.0.1", port=int(os.getenv("PORT", "5000")), debug=debug)
    finally:
        with _LOCK:
            if SESSION is not None:
                SESSION.on_app_quit()
