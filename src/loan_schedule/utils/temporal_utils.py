"""
Temporal Utility Functions.

This module provides utility functions for working with calendar months and
working days, particularly for placing installment due dates.
"""

import calendar
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def due_day_in_month(year: int, month: int, payment_day: int) -> date:
    """
    Build the due date for a given month.

    Args:
        year: Calendar year
        month: Calendar month (1-12)
        payment_day: Day of month the installment falls on (1-31)

    Returns:
        The due date, with the day clamped to the length of the month
    """
    return date(year, month, min(payment_day, days_in_month(year, month)))


def add_months(dt: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping to the last day of short months."""
    return dt + relativedelta(months=months)


def is_working_day(dt: date) -> bool:
    """
    Check if date is a working day.

    A working day is defined as a weekday (Monday-Friday).
    """
    return dt.weekday() < 5


def shift_off_weekend(dt: date) -> date:
    """
    Move a date that falls on a weekend to the following Monday.

    Args:
        dt: Date to check

    Returns:
        The date itself on a weekday; Saturday + 2 days or Sunday + 1 day otherwise
    """
    if is_working_day(dt):
        return dt
    return dt + timedelta(days=7 - dt.weekday())
