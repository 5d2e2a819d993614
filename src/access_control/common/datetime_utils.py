from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Optional

MS_PER_MINUTE = 60 * 1000
MS_PER_HOUR = 60 * MS_PER_MINUTE


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def time_of_day(moment: datetime) -> str:
    return moment.strftime("%H:%M:%S")


def to_epoch_ms(moment: Optional[datetime]) -> Optional[int]:
    if moment is None:
        return None
    return int(moment.timestamp() * 1000)


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Milliseconds between two instants, never negative."""
    delta = end - start
    return max(int(delta.total_seconds() * 1000), 0)


def format_duration(duration_ms: int | float) -> str:
    """Render milliseconds as whole hours and minutes, truncated."""
    duration_ms = int(duration_ms)
    hours = duration_ms // MS_PER_HOUR
    minutes = (duration_ms % MS_PER_HOUR) // MS_PER_MINUTE
    return f"{hours}h {minutes}m"


def month_range(month: int, year: int) -> tuple[date, date]:
    """First and last calendar day of a month (inclusive)."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)
