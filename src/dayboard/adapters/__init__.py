"""Adapters - I/O implementations of ports."""

from .json_file_store import JsonFileStore
from .memory_store import MemoryStore
from .system import SystemClock, short_id, uuid_id

__all__ = [
    "JsonFileStore",
    "MemoryStore",
    "SystemClock",
    "short_id",
    "uuid_id",
]
