"""System clock and identifier generators."""

import secrets
import time
import uuid
from datetime import datetime

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class SystemClock:
    """Implements Clock protocol using the local wall clock."""

    def now(self) -> datetime:
        return datetime.now()


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def uuid_id() -> str:
    """Random UUID4 string."""
    return str(uuid.uuid4())


def short_id() -> str:
    """
    Compact id: base36 epoch milliseconds followed by random base36 digits.

    Sorts roughly by creation time; the random tail keeps ids generated in
    the same millisecond apart.
    """
    millis = time.time_ns() // 1_000_000
    return _to_base36(millis) + _to_base36(secrets.randbits(52))
