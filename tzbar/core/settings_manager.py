from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tzbar.core.config_paths import get_settings_db_path
from tzbar.core.logger import log

SETTINGS_KEY = "AppSettings"


class SettingsManager:
    """
    SQLite-backed settings store with a simple key/value table.
    Values are JSON-encoded to preserve existing data structures.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None) -> None:
        self.db_path = Path(db_path) if db_path is not None else get_settings_db_path()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: Optional[sqlite3.Connection] = None
        self._data: Dict[str, Any] = {}

        self._init_db()
        self.reload()

    # ---------- internal I/O ---------- #

    def _init_db(self) -> None:
        self._conn = sqlite3.connect(self.db_path)
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT
            )
            """
        )
        self._conn.commit()

    def reload(self) -> None:
        """Reload settings from SQLite into the in-memory dict."""
        cur = self._conn.execute("SELECT key, value FROM kv")
        loaded: Dict[str, Any] = {}
        for key, val in cur.fetchall():
            try:
                loaded[key] = json.loads(val)
            except Exception:
                loaded[key] = val
        self._data = loaded

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ---------- public data API ---------- #

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a key and immediately persist to SQLite.
        """
        self._data[key] = value
        try:
            with self._conn:
                self._conn.execute(
                    "INSERT OR REPLACE INTO kv(key,value) VALUES(?,?)",
                    (key, json.dumps(value)),
                )
        except Exception as e:
            log.error("SettingsManager: failed to write key %s: %s", key, e)
            raise


class MemoryKeyValueStore:
    """Process-local stand-in for SettingsManager (tests, --print runs)."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class KeyValueSettingsStore:
    """
    Persistence adapter that keeps the serialized AppSettings blob under a
    single key of a get/set key-value store.

    load() returns the stored bytes or None; save() overwrites them.
    """

    def __init__(self, kv: Any, key: str = SETTINGS_KEY) -> None:
        self.kv = kv
        self.key = key

    def load(self) -> Optional[bytes]:
        value = self.kv.get(self.key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value
        if isinstance(value, str):
            return value.encode("utf-8")
        # Older stores may hold the decoded document itself
        return json.dumps(value).encode("utf-8")

    def save(self, blob: bytes) -> None:
        self.kv.set(self.key, blob.decode("utf-8"))
