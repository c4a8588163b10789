"""Infra layer utilities (storage, UA pool)."""

from .storage import ChapterRepository, SQLiteManager, StorageError
from .ua_pool import UserAgentPool

__all__ = ["ChapterRepository", "SQLiteManager", "StorageError", "UserAgentPool"]
