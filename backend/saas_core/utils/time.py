"""Millisecond timestamps used by every persisted row."""

import calendar
import time
from datetime import datetime, timezone


def now_ms() -> int:
    return int(time.time() * 1000)


def to_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def add_months(value: datetime, months: int) -> datetime:
    """Shift a datetime by whole calendar months, clamping to the month's last day."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def billing_period(months: int = 1) -> tuple[int, int]:
    """Return (start, end) in milliseconds for a period starting now."""
    start = datetime.now(timezone.utc)
    return to_ms(start), to_ms(add_months(start, months))
