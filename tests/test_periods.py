from datetime import date

import pytest

from app.core.periods import (
    last_completed_month,
    month_days,
    month_window,
    parse_provider_date,
    period_key,
    previous_month,
    same_month_last_year,
    shift_month,
    trailing_window,
)


class TestParseProviderDate:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("/Date(1761955200000)/", "2025-11-01"),
            ("/Date(1761955200000+0200)/", "2025-11-01"),
            ("/Date(1761955200000-0700)/", "2025-10-31"),
            ("2025-11-03", "2025-11-03"),
            ("2025-11-03T10:00:00Z", "2025-11-03"),
            ("2025-11-03T10:00:00", "2025-11-03"),
            ("2025-11-03T10:00:00.1234567", "2025-11-03"),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_provider_date(value) == expected

    @pytest.mark.parametrize(
        "value", ["", None, "garbage", "/Date(abc)/", "2025-13-45", 12345, ["2025-11-01"]]
    )
    def test_unparseable_returns_empty(self, value):
        assert parse_provider_date(value) == ""


def test_period_key():
    assert period_key(2025, 3) == "2025-03"


def test_shift_month_crosses_years():
    assert shift_month(2025, 1, -1) == (2024, 12)
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2025, 11, -15) == (2024, 8)


def test_month_window_handles_leap_years():
    assert month_window(2024, 2) == ("2024-02-01", "2024-02-29")
    assert month_window(2025, 2).end == "2025-02-28"


def test_comparison_windows():
    assert previous_month(2025, 1) == ("2024-12-01", "2024-12-31")
    assert same_month_last_year(2025, 11) == ("2024-11-01", "2024-11-30")


def test_trailing_window_spans_sixteen_months():
    assert trailing_window(2025, 11) == ("2024-08-01", "2025-11-30")


def test_window_contains():
    window = month_window(2025, 11)
    assert window.contains("2025-11-01")
    assert window.contains("2025-11-30")
    assert not window.contains("2025-12-01")
    assert not window.contains("")


def test_month_days():
    days = month_days(2025, 11)
    assert len(days) == 30
    assert days[0] == "2025-11-01"
    assert days[-1] == "2025-11-30"


def test_last_completed_month():
    assert last_completed_month(date(2026, 1, 15)) == (2025, 12)
    assert last_completed_month(date(2025, 11, 3)) == (2025, 10)
