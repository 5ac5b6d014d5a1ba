"""
Datetime utility functions.
Provides replacements for deprecated datetime functions.
"""

from datetime import date, datetime
from typing import Optional
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def calculate_age(birth_date: Optional[date], today: Optional[date] = None) -> Optional[int]:
    """
    Age in whole years on ``today`` (defaults to the current UTC date).

    Examples:
        >>> calculate_age(date(2000, 6, 15), today=date(2024, 6, 14))
        23
        >>> calculate_age(date(2000, 6, 15), today=date(2024, 6, 15))
        24
    """
    if birth_date is None:
        return None
    today = today or utcnow().date()
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    """Serialize a datetime for API payloads."""
    return value.isoformat() if value else None
