"""Date manipulation utilities"""

from datetime import date
from dateutil.relativedelta import relativedelta


def add_months(from_date: date, months: int) -> date:
    """Calendar month arithmetic; day is clamped to the target month's last day (Jan 31 + 1 -> Feb 28/29)"""
    return from_date + relativedelta(months=months)


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative if end is earlier)"""
    return (end - start).days
