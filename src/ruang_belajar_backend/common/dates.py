'''
Calendar helpers shared by the accounting core and the API models.
'''
from datetime import date, datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from .config import settings

def business_today() -> date:
    """Today's date in the business timezone (Settings.BUSINESS_TIMEZONE)."""
    return datetime.now(ZoneInfo(settings.BUSINESS_TIMEZONE)).date()

def parse_instant(value: Any) -> Optional[datetime]:
    """
    Turns a record or reference date into a naive local datetime.

    - datetime: used as-is, tzinfo dropped
    - date: taken at 00:00
    - str: ISO date ('2024-01-10') or ISO datetime ('2024-01-10T08:30:00'),
      a trailing 'Z' included
    Anything else, or an unparseable string, gives None.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            return None
    return None

def parse_calendar_date(value: Any) -> Optional[date]:
    instant = parse_instant(value)
    return instant.date() if instant is not None else None
