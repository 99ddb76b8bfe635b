from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable, List, Optional, Tuple


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def working_dates(year: int, month: int, weekend_days: Iterable[int], up_to_day: Optional[int] = None) -> List[date]:
    """Dates in the month that are not weekend days, optionally stopping at ``up_to_day``."""
    weekend = set(weekend_days)
    last_day = calendar.monthrange(year, month)[1]
    limit = min(up_to_day, last_day) if up_to_day else last_day
    return [
        date(year, month, day)
        for day in range(1, limit + 1)
        if date(year, month, day).weekday() not in weekend
    ]


def working_days_in_month(year: int, month: int, weekend_days: Iterable[int], up_to_day: Optional[int] = None) -> int:
    return len(working_dates(year, month, weekend_days, up_to_day))


def is_open_month(year: int, month: int, today: date) -> bool:
    return today.year == year and today.month == month
