"""Key-value storage interface."""

from typing import Protocol


class KeyValueStore(Protocol):
    """Interface for persisting one serialized JSON blob per key."""

    def get(self, key: str) -> str | None:
        """Read the blob stored under key. Returns None if not found."""
        ...

    def set(self, key: str, value: str) -> None:
        """Write/overwrite the blob stored under key."""
        ...
