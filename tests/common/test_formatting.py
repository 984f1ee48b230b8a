import pytest
from datetime import date, datetime

from src.ruang_belajar_backend.common.formatting import format_idr, format_date_id
from src.ruang_belajar_backend.common.dates import parse_instant, parse_calendar_date


@pytest.mark.parametrize("amount,expected", [
    (150000, "Rp 150.000"),
    (0, "Rp 0"),
    (999, "Rp 999"),
    (1250000, "Rp 1.250.000"),
    (-20000, "-Rp 20.000"),
    (None, "-"),
])
def test_format_idr(amount, expected):
    assert format_idr(amount) == expected

def test_format_date_id():
    assert format_date_id(date(2024, 1, 8)) == "8/1/2024"
    assert format_date_id(datetime(2024, 12, 31, 23, 59)) == "31/12/2024"
    assert format_date_id(None) == "-"

def test_parse_instant():
    assert parse_instant(date(2024, 1, 10)) == datetime(2024, 1, 10)
    assert parse_instant("2024-01-10T08:30:00+07:00") == datetime(2024, 1, 10, 8, 30)
    assert parse_instant("2024-01-10T08:30:00Z") == datetime(2024, 1, 10, 8, 30)
    assert parse_instant("2024-01-10T08:30:00.250z") == datetime(2024, 1, 10, 8, 30, 0, 250000)
    assert parse_instant("  ") is None
    assert parse_instant(["2024-01-10"]) is None

def test_parse_calendar_date():
    assert parse_calendar_date("2024-01-10T23:59:00") == date(2024, 1, 10)
    assert parse_calendar_date("10/01/2024") is None
