"""Trailing time windows for analytics."""

import re
from datetime import datetime, timedelta

from pantry_analytics.domain.analytics import AnalysisWindows, PeriodWindow

DEFAULT_DAYS = 30

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class InvalidWindowError(ValueError):
    """Raised when a requested window length is not usable."""


def parse_days(raw: str | None, default: int = DEFAULT_DAYS) -> int:
    """Parse a day-count query value, falling back to the default.

    Leading digits are honored ("7d" -> 7); a missing or non-numeric value
    yields the default. The sign is kept so callers can reject it.
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if not match:
        return default
    return int(match.group(1))


def compute_windows(
    days: int, now: datetime, max_days: int | None = None
) -> AnalysisWindows:
    """Return the current window ending at now and the one before it."""
    if days <= 0:
        raise InvalidWindowError(f"days must be a positive integer, got {days}")
    if max_days is not None and days > max_days:
        raise InvalidWindowError(f"days must not exceed {max_days}, got {days}")
    length = timedelta(days=days)
    current = PeriodWindow(start=now - length, end=now)
    previous = PeriodWindow(start=current.start - length, end=current.start)
    return AnalysisWindows(days=days, current=current, previous=previous)
