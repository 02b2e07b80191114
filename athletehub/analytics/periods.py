import calendar
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from athletehub.utils.serialize import as_utc


def months_ago(now: datetime, months: int) -> datetime:
    """Same day-of-month `months` back, clamped to the month's length."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def period_start(period: Optional[str], now: datetime, default_days: int = 30) -> Optional[datetime]:
    """
    Lower bound for a named reporting period. None means "all time".
    """
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return months_ago(now, 1)
    if period == "6months":
        return months_ago(now, 6)
    if period == "year":
        return months_ago(now, 12)
    if period in ("all", "career"):
        return None
    return now - timedelta(days=default_days)


def within(items: Iterable[dict], field: str, start: Optional[datetime], end: Optional[datetime] = None) -> List[dict]:
    out = []
    for item in items:
        value = as_utc(item.get(field))
        if value is None:
            continue
        if start is not None and value < start:
            continue
        if end is not None and value > end:
            continue
        out.append(item)
    return out
