"""File-based key-value storage adapter."""

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStore:
    """
    File-based key-value storage.

    Implements KeyValueStore protocol. Each key gets a JSON file in the
    data directory; writes go through a temp file so a crash mid-write
    never leaves a truncated blob behind.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path_for_key(self, key: str) -> Path:
        """Get the file path for a given key."""
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> str | None:
        """Read the blob stored under key. Returns None if not found."""
        path = self._path_for_key(key)
        if not path.exists():
            return None
        return path.read_text()

    def set(self, key: str, value: str) -> None:
        """Write/overwrite the blob stored under key."""
        path = self._path_for_key(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value)
        tmp.replace(path)
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def keys(self) -> list[str]:
        """List stored keys."""
        return sorted(p.stem for p in self.data_dir.glob("*.json"))
