"""Relative time windows used by every visualization query."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Final

from loguru import logger

log = logger.bind(module="core.time_range")

__all__ = [
    "DEFAULT_TIME_RANGE",
    "TIME_RANGE_KEYS",
    "TimeRange",
    "pick_time_range_key",
    "resolve_time_range",
    "subtract_months",
]

DEFAULT_TIME_RANGE: Final[str] = "3m"

# key -> (days, months)
_OFFSETS: Final[dict[str, tuple[int, int]]] = {
    "1w": (7, 0),
    "1m": (0, 1),
    "3m": (0, 3),
    "6m": (0, 6),
    "1y": (0, 12),
}
TIME_RANGE_KEYS: Final[tuple[str, ...]] = tuple(_OFFSETS)


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Inclusive calendar window `[start_date, end_date]`."""

    key: str
    start_date: date
    end_date: date

    @property
    def since(self) -> datetime:
        """Start of `start_date` in UTC."""
        return datetime.combine(self.start_date, time.min, tzinfo=timezone.utc)

    @property
    def until(self) -> datetime:
        """Last second of `end_date` in UTC."""
        return datetime.combine(self.end_date, time(23, 59, 59), tzinfo=timezone.utc)

    def contains(self, moment: datetime) -> bool:
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return self.since <= moment <= self.until


def subtract_months(value: date, months: int) -> date:
    """Step back whole calendar months, clamping to the target month's last day."""
    index = value.year * 12 + (value.month - 1) - int(months)
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def pick_time_range_key(key: str | None, *, default: str = DEFAULT_TIME_RANGE) -> str:
    """Return `key` when it is a known window, otherwise `default`."""
    normalized = (key or "").strip()
    if normalized in _OFFSETS:
        return normalized
    if normalized:
        log.debug("Unknown time range {!r}; falling back to {}", normalized, default)
    return default if default in _OFFSETS else DEFAULT_TIME_RANGE


def resolve_time_range(
    key: str | None,
    *,
    today: date | None = None,
    default: str = DEFAULT_TIME_RANGE,
) -> TimeRange:
    """Map a time-range key onto concrete dates ending today.

    Unknown or missing keys fall back to `default` instead of failing.
    """
    normalized = pick_time_range_key(key, default=default)

    end = today or datetime.now(timezone.utc).date()
    days, months = _OFFSETS[normalized]
    start = end - timedelta(days=days) if days else subtract_months(end, months)
    return TimeRange(key=normalized, start_date=start, end_date=end)
