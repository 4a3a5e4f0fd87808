"""Unit tests for date, number and formatting helpers"""

from datetime import date
from pocket_cfo.utils.date_utils import add_months, month_label, months_between, shift_month, trailing_months
from pocket_cfo.utils.formatting import fmt, pct
from pocket_cfo.utils.numbers import clamp, round_amount, round_half_up, safe_percent, safe_ratio


def test_trailing_months_crosses_year_boundary():
    window = trailing_months(date(2024, 2, 10), count=4)

    assert window == [(2023, 10), (2023, 11), (2024, 0), (2024, 1)]


def test_shift_month_and_labels():
    assert shift_month(2024, 0, -1) == (2023, 11)
    assert shift_month(2024, 11, 1) == (2025, 0)
    assert month_label(-1) == "Dec"
    assert month_label(12) == "Jan"


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 11, 30), 2) == date(2025, 1, 30)
    assert add_months(date(2024, 5, 15), 0) == date(2024, 5, 15)
    assert add_months(date(2024, 10, 31), 2) == date(2024, 12, 31)
    assert add_months(date(2024, 1, 31), 3) == date(2024, 4, 30)


def test_months_between_ignores_day():
    assert months_between(date(2024, 1, 31), date(2024, 2, 1)) == 1
    assert months_between(date(2023, 11, 1), date(2024, 2, 28)) == 3


def test_zero_guarded_division():
    assert safe_ratio(5, 0) == 0
    assert safe_percent(5, 0) == 0
    assert safe_percent(1, 4) == 25


def test_rounding_halves_up():
    assert round_amount(2.5) == 3
    assert round_amount(-2.5) == -2
    assert round_half_up(0.125, 2) == 0.13
    assert clamp(120) == 100
    assert clamp(-3) == 0


def test_formatting():
    assert fmt(1234567.4) == "₹1,234,567"
    assert fmt(-2500) == "₹2,500"
    assert pct(12.345) == "12.3%"
