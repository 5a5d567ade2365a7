"""
Local cache: a best-effort shadow copy of the project list.

Storage backends expose a synchronous key → string API (the shape of browser
localStorage). LocalCache sits on top and never lets a storage failure
escape: a failed write is logged and the cache reports a miss until a later
write succeeds.
"""
import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .errors import CacheError
from .schema import Project

logger = logging.getLogger(__name__)

PROJECTS_KEY = "keeptrack_projects"
SEEDED_KEY = "keeptrack_seeded"


# ── Storage backends ────────────────────────────────────────────────────────


class MemoryStorage:
    """In-process storage. Used by tests and when no cache file is configured."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


def _connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


class SQLiteStorage:
    """Key/value table in a SQLite file."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS cache_items (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def get_item(self, key: str) -> Optional[str]:
        try:
            with _connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM cache_items WHERE key = ? LIMIT 1", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            raise CacheError(f"read {key}: {e}") from e
        return row["value"] if row else None

    def set_item(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            with _connect(self.db_path) as conn:
                conn.execute("""
                    INSERT INTO cache_items (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                """, (key, value, now))
                conn.commit()
        except sqlite3.Error as e:
            raise CacheError(f"write {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            with _connect(self.db_path) as conn:
                conn.execute("DELETE FROM cache_items WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as e:
            raise CacheError(f"remove {key}: {e}") from e


# ── LocalCache ──────────────────────────────────────────────────────────────


class LocalCache:
    """Project-list cache with a seeded flag, over any storage backend."""

    def __init__(self, storage=None):
        self.storage = storage if storage is not None else MemoryStorage()
        self._write_failed = False

    def save(self, projects: List[Project]) -> bool:
        """Serialize and store the list. Returns False on failure, never raises."""
        try:
            payload = json.dumps([p.to_dict() for p in projects])
            self.storage.set_item(PROJECTS_KEY, payload)
        except Exception as e:
            # quota, disk, locked db... all become a cache miss
            logger.warning(f"Failed to save projects to cache: {e}")
            self._write_failed = True
            return False
        self._write_failed = False
        return True

    def load(self) -> Optional[List[Project]]:
        """Return the cached list, or None if absent, corrupt, or stale after a failed write."""
        if self._write_failed:
            return None
        try:
            data = self.storage.get_item(PROJECTS_KEY)
        except Exception as e:
            logger.warning(f"Failed to load projects from cache: {e}")
            return None
        if not data:
            return None
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Ignoring corrupt project cache")
            return None
        if not isinstance(parsed, list):
            return None
        return [Project.from_dict(item) for item in parsed if isinstance(item, dict)]

    def put(self, project: Project) -> bool:
        """Replace one project (by id) in the cached list, if a list is cached."""
        cached = self.load()
        if cached is None:
            return False
        return self.save([project if p.id == project.id else p for p in cached])

    def is_seeded(self) -> bool:
        try:
            return self.storage.get_item(SEEDED_KEY) == "true"
        except Exception as e:
            logger.warning(f"Failed to read seeded flag: {e}")
            return False

    def mark_seeded(self) -> None:
        try:
            self.storage.set_item(SEEDED_KEY, "true")
        except Exception as e:
            logger.warning(f"Failed to set seeded flag: {e}")

    def clear(self) -> None:
        """Remove both keys. Test/reset paths only."""
        for key in (PROJECTS_KEY, SEEDED_KEY):
            try:
                self.storage.remove_item(key)
            except Exception as e:
                logger.warning(f"Failed to remove {key} from cache: {e}")
        self._write_failed = False
