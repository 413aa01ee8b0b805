"""Age of an epoch-millisecond timestamp relative to the local clock."""
from __future__ import annotations

import time
from typing import Optional

MAX_PLAUSIBLE_AGE_S = 31_536_000  # one year; anything older is corrupt data


def now_ms() -> int:
    return int(time.time() * 1000)


def age_seconds(timestamp_ms: Optional[int], now: int) -> Optional[int]:
    """Return whole seconds elapsed since ``timestamp_ms``.

    ``None`` is the unbounded age: the timestamp is missing, or more than a
    year old. A negative result means the remote clock is ahead of ours and
    is returned as-is.
    """
    if timestamp_ms is None:
        return None
    age = int((now - timestamp_ms) / 1000)  # truncates toward zero
    if age > MAX_PLAUSIBLE_AGE_S:
        return None
    return age


def within(age: Optional[int], lower: int, upper: int) -> bool:
    """True for a bounded age in the half-open range [lower, upper)."""
    return age is not None and lower <= age < upper
