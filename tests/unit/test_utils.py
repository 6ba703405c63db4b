"""Unit tests for money and date helpers"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from cashflow_calendar.utils.date_utils import (
    clamp_day,
    format_short_date,
    generate_date_range,
    parse_calendar_date,
    resolve_today,
)
from cashflow_calendar.utils.money import format_money, from_cents, is_finite_amount, to_cents


@pytest.mark.parametrize(
    "amount,expected",
    [
        (10, 1_000),
        (10.1, 1_010),
        ("0.005", 1),
        (Decimal("-2.345"), -235),
        ("1,000", None),
    ],
)
def test_to_cents(amount, expected):
    if expected is None:
        with pytest.raises(ValueError):
            to_cents(amount)
    else:
        assert to_cents(amount) == expected


def test_to_cents_rejects_non_finite_bools_and_oversized():
    for amount in (float("nan"), float("inf"), True, 1e30, "1e40"):
        with pytest.raises(ValueError):
            to_cents(amount)


def test_from_cents():
    assert from_cents(-20_000) == -200.0
    assert from_cents(1) == 0.01


def test_is_finite_amount():
    assert is_finite_amount("12.5")
    assert not is_finite_amount(None)
    assert not is_finite_amount(float("nan"))
    assert not is_finite_amount(False)
    assert not is_finite_amount("twelve")


def test_format_money():
    assert format_money(-20_000) == "-$200.00"
    assert format_money(123_456_789, "usd") == "$1,234,567.89"
    assert format_money(50_000, "EUR") == "€500.00"
    assert format_money(123_456, "SEK") == "1,234.56 SEK"


def test_clamp_day():
    assert clamp_day(2024, 2, 31) == date(2024, 2, 29)
    assert clamp_day(2023, 2, 30) == date(2023, 2, 28)
    assert clamp_day(2024, 4, 15) == date(2024, 4, 15)


def test_generate_date_range_inclusive():
    assert generate_date_range(date(2024, 2, 28), date(2024, 3, 1)) == [
        date(2024, 2, 28),
        date(2024, 2, 29),
        date(2024, 3, 1),
    ]


def test_parse_calendar_date():
    assert parse_calendar_date("2024-01-05") == date(2024, 1, 5)
    assert parse_calendar_date("2024-01-05T23:30:00-05:00") == date(2024, 1, 5)
    assert parse_calendar_date(datetime(2024, 1, 5, 12, 0)) == date(2024, 1, 5)
    assert parse_calendar_date(date(2024, 1, 5)) == date(2024, 1, 5)

    with pytest.raises(ValueError, match="Date is required"):
        parse_calendar_date("")
    with pytest.raises(ValueError):
        parse_calendar_date("01/05/2024")


def test_resolve_today_uses_user_timezone():
    """03:00 UTC on Jan 2 is still Jan 1 in New York"""
    now = datetime(2024, 1, 2, 3, 0, tzinfo=timezone.utc)

    assert resolve_today("America/New_York", now=now) == date(2024, 1, 1)
    assert resolve_today("Asia/Tokyo", now=now) == date(2024, 1, 2)
    assert resolve_today(None, now=now) == date(2024, 1, 2)


def test_resolve_today_unknown_timezone_falls_back_to_utc():
    now = datetime(2024, 1, 2, 3, 0, tzinfo=timezone.utc)

    assert resolve_today("Mars/Olympus_Mons", now=now) == date(2024, 1, 2)


def test_format_short_date():
    assert format_short_date(date(2024, 3, 3)) == "Mar 3"
