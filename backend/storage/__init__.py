from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from core.config import settings
from core.database import open_session
from storage.base import DuplicateKeyError, InUseError, InvalidValueError, Storage, StorageError
from storage.memory import MemoryStorage
from storage.sql import SqlStorage


_memory_storage: MemoryStorage | None = None
_memory_storage_lock = threading.Lock()


def get_memory_storage() -> MemoryStorage:
    global _memory_storage
    with _memory_storage_lock:
        if _memory_storage is None:
            _memory_storage = MemoryStorage()
        return _memory_storage


@contextmanager
def storage_session() -> Iterator[Storage]:
    """Open the configured backend for one unit of work (a request or a background job)."""

    if settings.storage_backend == "memory":
        yield get_memory_storage()
        return

    db = open_session()
    try:
        yield SqlStorage(db)
    finally:
        db.close()


def get_storage() -> Iterator[Storage]:
    with storage_session() as storage:
        yield storage


__all__ = [
    "DuplicateKeyError",
    "InUseError",
    "InvalidValueError",
    "MemoryStorage",
    "SqlStorage",
    "Storage",
    "StorageError",
    "get_memory_storage",
    "get_storage",
    "storage_session",
]
