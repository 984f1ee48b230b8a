'''
Display helpers for the fixed id-ID locale (Indonesian Rupiah, d/m/yyyy dates).
'''
from datetime import date, datetime
from typing import Optional

MISSING_VALUE = "-"

def format_idr(amount: Optional[int]) -> str:
    """
    Formats an integer Rupiah amount the way id-ID renders currency:
    'Rp 150.000', '-Rp 20.000'. No decimals. None renders as '-'.
    """
    if amount is None:
        return MISSING_VALUE
    grouped = f"{abs(int(amount)):,}".replace(",", ".")
    sign = "-" if amount < 0 else ""
    return f"{sign}Rp {grouped}"

def format_date_id(value: Optional[date | datetime]) -> str:
    """Short id-ID date, e.g. 8/1/2024."""
    if value is None:
        return MISSING_VALUE
    return f"{value.day}/{value.month}/{value.year}"
