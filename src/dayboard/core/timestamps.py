"""Timestamp text encoding shared by persisted tasks and events."""

from datetime import datetime


def parse_timestamp(value: str) -> datetime:
    """
    Revive a stored timestamp as a naive local datetime.

    Accepts our own isoformat() output as well as UTC strings with a
    trailing Z, which are converted to local wall-clock time.
    """
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt
