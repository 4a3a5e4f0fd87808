"""Date and calendar-month utilities"""

import calendar
from datetime import date
from typing import List, Tuple

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def month_key(day: date) -> Tuple[int, int]:
    """Bucketing key (year, zero-based month index)"""
    return day.year, day.month - 1


def month_label(month_index: int) -> str:
    """Short label for a zero-based month index"""
    return MONTH_NAMES[month_index % 12]


def shift_month(year: int, month_index: int, offset: int) -> Tuple[int, int]:
    """Move (year, zero-based month) by offset months, wrapping across years"""
    total = year * 12 + month_index + offset
    return total // 12, total % 12


def trailing_months(as_of: date, count: int = 12) -> List[Tuple[int, int]]:
    """(year, month) keys of the trailing window ending at as_of's month, oldest first"""
    year, month_index = month_key(as_of)
    return [shift_month(year, month_index, -i) for i in range(count - 1, -1, -1)]


def add_months(day: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length"""
    year, month_index = shift_month(day.year, day.month - 1, months)
    month = month_index + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end, ignoring the day of month"""
    return (end.year - start.year) * 12 + (end.month - start.month)
