"""Human-readable formatting for display records and notification bodies."""
from __future__ import annotations

from typing import Optional

from .ages import age_seconds

SKEW_DISPLAY_LIMIT_S = 60


def format_duration(seconds: int) -> str:
    if seconds >= 2_592_000:
        return f"{seconds // 2_592_000}mo"
    if seconds >= 86400:
        return f"{seconds // 86400}d{(seconds % 86400) // 3600}h"
    if seconds >= 3600:
        return f"{seconds // 3600}h{(seconds % 3600) // 60:02d}m"
    if seconds >= 60:
        return f"{seconds // 60}m{seconds % 60:02d}s"
    return f"{seconds}s"


def format_age(timestamp_ms: Optional[int], now: int) -> str:
    """'-' for no data, 'sync?' for a clock well ahead of ours, 'now' for slight skew."""
    age = age_seconds(timestamp_ms, now)
    if age is None:
        return "-"
    if age < -SKEW_DISPLAY_LIMIT_S:
        return "sync?"
    if age < 0:
        return "now"
    return format_duration(age)


def truncate_middle(text: str, max_len: int) -> str:
    """Shorten to ``max_len`` keeping both ends, e.g. 'sogni-...-5090'."""
    if len(text) <= max_len:
        return text
    half = (max_len - 3) // 2
    if half <= 0:
        return text[:max_len]
    return f"{text[:half]}...{text[-half:]}"


def format_speed(speed: Optional[str]) -> str:
    return f"⚡{speed}x" if speed else "-"
