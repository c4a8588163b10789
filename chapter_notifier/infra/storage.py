"""SQLite persistence for collected chapters."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, Mapping

CHAPTER_COLUMNS = (
    "subject_title",
    "sequence_label",
    "detail_title",
    "link",
    "published_at",
)


class StorageError(RuntimeError):
    """Raised when the chapter database cannot be read or written."""


class SQLiteManager:
    """Manage SQLite connections with basic schema guarantees."""

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def connect(self, path: Path) -> sqlite3.Connection:
        path = Path(path)
        with self._lock:
            if path not in self._connections:
                try:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    conn = sqlite3.connect(path, check_same_thread=False)
                    conn.row_factory = sqlite3.Row
                    self._ensure_schema(conn)
                except (OSError, sqlite3.Error) as exc:
                    raise StorageError(f"could not open chapter database {path}: {exc}") from exc
                self._connections[path] = conn
            return self._connections[path]

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS collected_chapters (
                identity_key TEXT PRIMARY KEY,
                subject_title TEXT NOT NULL,
                sequence_label TEXT NOT NULL,
                detail_title TEXT NOT NULL DEFAULT '',
                link TEXT NOT NULL,
                published_at TEXT NOT NULL
            )
            """
        )
        conn.commit()

    def close_all(self) -> None:
        with self._lock:
            for conn in self._connections.values():
                conn.close()
            self._connections.clear()


class ChapterRepository:
    """Key-value table of collected chapters keyed by identity key."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = Path(db_path)
        self._lock = Lock()
        self._conn = self.manager.connect(self.db_path)

    def list_chapters(self) -> list[tuple[str, dict[str, str]]]:
        """Return every stored row as ``(identity_key, fields)``."""

        columns = ", ".join(CHAPTER_COLUMNS)
        with self._lock:
            try:
                rows = self._conn.execute(
                    f"SELECT identity_key, {columns} FROM collected_chapters ORDER BY rowid"
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"error loading collected chapters: {exc}") from exc
        return [(row["identity_key"], {name: row[name] for name in CHAPTER_COLUMNS}) for row in rows]

    def upsert_chapter(self, identity_key: str, fields: Mapping[str, str]) -> None:
        self.upsert_many([(identity_key, fields)])

    def upsert_many(self, items: Iterable[tuple[str, Mapping[str, str]]]) -> int:
        """Insert-or-update rows in one transaction; returns the row count."""

        placeholders = ", ".join("?" for _ in range(len(CHAPTER_COLUMNS) + 1))
        updates = ", ".join(f"{name} = excluded.{name}" for name in CHAPTER_COLUMNS)
        statement = (
            f"INSERT INTO collected_chapters (identity_key, {', '.join(CHAPTER_COLUMNS)}) "
            f"VALUES ({placeholders}) "
            f"ON CONFLICT(identity_key) DO UPDATE SET {updates}"
        )
        params = [
            (key, *(fields.get(name) or "" for name in CHAPTER_COLUMNS)) for key, fields in items
        ]
        with self._lock:
            try:
                with self._conn:
                    self._conn.executemany(statement, params)
            except sqlite3.Error as exc:
                raise StorageError(f"error saving collected chapters: {exc}") from exc
        return len(params)

    def count(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT count(*) FROM collected_chapters").fetchone()
        return int(row[0])


__all__ = ["CHAPTER_COLUMNS", "ChapterRepository", "SQLiteManager", "StorageError"]
