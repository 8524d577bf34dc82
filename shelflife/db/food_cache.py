"""Read-through cache of model shelf-life estimates backed by SQLite."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from ..context import normalize_text
from .schema import ensure_schema

logger = logging.getLogger(__name__)


def cache_key(name: str, location: str, opened: bool = False) -> str:
    """Build the normalized query string used as the cache key."""
    state = "open" if opened else "sealed"
    return f"{normalize_text(name)}|{location}|{state}"


class FoodCacheDB:
    """Caches model estimates keyed by normalized food query.

    Writes are idempotent upserts. One connection is shared across threads
    and every statement runs under an instance lock.
    """

    def __init__(self, db_path: str | Path = "~/.config/shelflife/cache.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def get(self, key: str) -> dict | None:
        """Return the cached entry for *key*, or None if not cached."""
        with self._lock:
            row = self._get_conn().execute(
                "SELECT * FROM food_cache WHERE query_key = ?",
                (key,),
            ).fetchone()
        return dict(row) if row else None

    def put(
        self,
        key: str,
        *,
        shelf_life_days: int,
        reason: str = "",
        source: str = "model",
    ) -> None:
        """Insert or update a cache entry."""
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                """INSERT INTO food_cache (query_key, shelf_life_days, reason, source)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(query_key) DO UPDATE SET
                     shelf_life_days=excluded.shelf_life_days,
                     reason=excluded.reason,
                     source=excluded.source,
                     updated_at=datetime('now', 'localtime')""",
                (key, shelf_life_days, reason, source),
            )
            conn.commit()

    def lookup(self, key: str) -> dict | None:
        """Best-effort ``get``: database errors are logged and read as a miss."""
        try:
            return self.get(key)
        except (sqlite3.Error, OSError):
            logger.warning("food cache lookup failed for %r", key, exc_info=True)
            return None

    def store(self, key: str, *, shelf_life_days: int, reason: str = "") -> None:
        """Best-effort ``put``: database errors are logged and ignored."""
        try:
            self.put(key, shelf_life_days=shelf_life_days, reason=reason)
        except (sqlite3.Error, OSError):
            logger.warning("food cache write failed for %r", key, exc_info=True)
