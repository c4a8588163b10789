"""In-memory registry of notified chapters backed by the SQLite repository."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict
from threading import Lock
from typing import Iterator

from ..infra.storage import ChapterRepository
from .extractor import ReleaseRecord


class DedupStore:
    """Thread-safe ``identity_key -> ReleaseRecord`` map.

    The in-memory map is authoritative while the process runs; the repository
    is only read by :meth:`load_all` and written by :meth:`save_all`. Entries
    are never removed.
    """

    def __init__(self, repository: ChapterRepository | None = None) -> None:
        self.repository = repository
        self._entries: dict[str, ReleaseRecord] = {}
        self._lock = Lock()
        # one lock per key ever claimed; grows with the store, never pruned
        self._key_locks: dict[str, Lock] = {}
        self._key_locks_guard = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.contains(key)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def insert(self, key: str, record: ReleaseRecord) -> bool:
        """Store ``record`` unless ``key`` is already present; first writer wins."""

        with self._lock:
            if key in self._entries:
                return False
            self._entries[key] = record
            return True

    @contextmanager
    def claim(self, key: str) -> Iterator[None]:
        """Serialise check-notify-insert sequences for one identity key."""

        with self._key_locks_guard:
            key_lock = self._key_locks.setdefault(key, Lock())
        with key_lock:
            yield

    def snapshot(self) -> dict[str, ReleaseRecord]:
        with self._lock:
            return dict(self._entries)

    def load_all(self) -> list[tuple[str, ReleaseRecord]]:
        """Hydrate from the repository; raises ``StorageError`` on failure."""

        if self.repository is None:
            return []
        rows = self.repository.list_chapters()
        loaded = [(key, ReleaseRecord(**fields)) for key, fields in rows]
        with self._lock:
            for key, record in loaded:
                self._entries[key] = record
        return loaded

    def save_all(self) -> int:
        """Upsert every entry; raises ``StorageError`` on failure."""

        if self.repository is None:
            return 0
        entries = self.snapshot()
        return self.repository.upsert_many((key, asdict(record)) for key, record in entries.items())


__all__ = ["DedupStore"]
