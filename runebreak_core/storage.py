from __future__ import annotations

import json
import logging
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from .config import GameConfig
from .errors import CorruptSave, PersistenceError, SaveNotFound
from .state import SessionSnapshot, json_to_snapshot, snapshot_to_json

logger = logging.getLogger(__name__)


class PersistenceGateway(ABC):
    """A single local save slot."""

    @abstractmethod
    def exists(self) -> bool:
        ...

    @abstractmethod
    def load(self) -> SessionSnapshot:
        """Returns the saved snapshot. Raises SaveNotFound, CorruptSave or PersistenceError."""

    @abstractmethod
    def save(self, snapshot: SessionSnapshot) -> None:
        """Replaces the slot contents. Raises PersistenceError on I/O failure."""

    @abstractmethod
    def delete(self) -> bool:
        """Empties the slot. Returns True if something was removed."""


class MemoryGateway(PersistenceGateway):
    def __init__(self, snapshot: Optional[SessionSnapshot] = None):
        self.snapshot = snapshot

    def exists(self) -> bool:
        return self.snapshot is not None

    def load(self) -> SessionSnapshot:
        if self.snapshot is None:
            raise SaveNotFound("no saved game")
        return self.snapshot

    def save(self, snapshot: SessionSnapshot) -> None:
        self.snapshot = snapshot

    def delete(self) -> bool:
        had = self.snapshot is not None
        self.snapshot = None
        return had


def _ensure_dir(path: str) -> None:
    """Ensures the directory for a save file exists."""
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _resolve_save_path(path: str) -> str:
    """Resolves a potentially unwritable save path to a writable one, creating the directory if needed."""
    try:
        _ensure_dir(path)
        return path
    except PermissionError:
        pass
    base = os.path.basename(path) or "gamesave.json"
    candidates = [
        os.getenv("RUNEBREAK_DATA_DIR"),
        os.path.join(os.path.expanduser("~"), ".runebreak"),
        os.path.join(os.getcwd(), "data"),
        tempfile.gettempdir(),
    ]
    for d in candidates:
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
            logger.warning("save path %s is not writable; using %s", path, d)
            return os.path.join(d, base)
        except OSError:
            continue
    return base


class JsonFileGateway(PersistenceGateway):
    """One JSON document on disk, replaced atomically on every save."""

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def load(self) -> SessionSnapshot:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                obj = json.load(f)
        except FileNotFoundError:
            raise SaveNotFound(f"no save file at {self.path}") from None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptSave(f"{self.path}: {e}") from e
        except OSError as e:
            raise PersistenceError(f"cannot read {self.path}: {e}") from e
        return json_to_snapshot(obj)

    def save(self, snapshot: SessionSnapshot) -> None:
        try:
            self.path = _resolve_save_path(self.path)
            directory = os.path.dirname(self.path) or "."
            fd, tmp = tempfile.mkstemp(prefix=".gamesave-", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(snapshot_to_json(snapshot), f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.remove(tmp)
                raise
        except OSError as e:
            raise PersistenceError(f"cannot write {self.path}: {e}") from e
        logger.info("game saved to %s", self.path)

    def delete(self) -> bool:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError(f"cannot delete {self.path}: {e}") from e
        logger.info("save file %s deleted", self.path)
        return True


class SqliteGateway(PersistenceGateway):
    """The save slot as a single row of a SQLite table."""

    def __init__(self, path: str):
        self.path = path

    def _connect(self) -> sqlite3.Connection:
        self.path = _resolve_save_path(self.path)
        conn = sqlite3.connect(self.path)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS save_slot (
                slot INTEGER PRIMARY KEY CHECK (slot = 0),
                payload TEXT NOT NULL,
                saved_at TEXT NOT NULL
            )
            """
        )
        conn.commit()
        return conn

    def _fetch(self) -> Optional[str]:
        if not os.path.isfile(self.path):
            return None
        try:
            conn = self._connect()
            try:
                row = conn.execute("SELECT payload FROM save_slot WHERE slot = 0").fetchone()
            finally:
                conn.close()
        except (OSError, sqlite3.DatabaseError) as e:
            raise PersistenceError(f"cannot read {self.path}: {e}") from e
        return row[0] if row else None

    def exists(self) -> bool:
        try:
            return self._fetch() is not None
        except PersistenceError:
            logger.warning("save database %s is unreadable", self.path)
            return False

    def load(self) -> SessionSnapshot:
        payload = self._fetch()
        if payload is None:
            raise SaveNotFound(f"no saved game in {self.path}")
        try:
            obj = json.loads(payload)
        except json.JSONDecodeError as e:
            raise CorruptSave(f"{self.path}: {e}") from e
        return json_to_snapshot(obj)

    def save(self, snapshot: SessionSnapshot) -> None:
        try:
            conn = self._connect()
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO save_slot (slot, payload, saved_at) VALUES (0, ?, ?)",
                    (
                        json.dumps(snapshot_to_json(snapshot)),
                        datetime.now(timezone.utc).isoformat(timespec="seconds"),
                    ),
                )
                conn.commit()
            finally:
                conn.close()
        except (OSError, sqlite3.DatabaseError) as e:
            raise PersistenceError(f"cannot write {self.path}: {e}") from e
        logger.info("game saved to %s", self.path)

    def delete(self) -> bool:
        if not os.path.isfile(self.path):
            return False
        try:
            conn = self._connect()
            try:
                cur = conn.execute("DELETE FROM save_slot WHERE slot = 0")
                conn.commit()
                removed = cur.rowcount > 0
            finally:
                conn.close()
        except (OSError, sqlite3.DatabaseError) as e:
            raise PersistenceError(f"cannot delete from {self.path}: {e}") from e
        return removed


def gateway_from_config(config: GameConfig) -> PersistenceGateway:
    if config.save_backend == "sqlite":
        return SqliteGateway(config.save_path)
    return JsonFileGateway(config.save_path)
