from datetime import date, datetime

import pytest

from planner.dates import (
    InvalidDateError,
    add_months,
    format_currency,
    format_date,
    format_date_full,
    format_month_year,
    is_same_day,
    month_boundaries,
    month_grid,
    parse_iso_date,
    week_boundaries,
)


class TestParseIsoDate:
    def test_valid(self):
        assert parse_iso_date("2024-02-29") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["2024-13-40", "2023-02-29", "2024-5-1", "20240501", "2024-05-01T00:00", ""])
    def test_invalid(self, value):
        with pytest.raises(InvalidDateError):
            parse_iso_date(value)


class TestBoundaries:
    def test_month_boundaries(self):
        assert month_boundaries(date(2024, 2, 14)) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_boundaries("2023-12-31") == (date(2023, 12, 1), date(2023, 12, 31))

    def test_week_runs_sunday_to_saturday(self):
        # 2024-05-01 is a Wednesday
        assert week_boundaries(date(2024, 5, 1)) == (date(2024, 4, 28), date(2024, 5, 4))
        # a Sunday starts its own week
        assert week_boundaries(date(2024, 4, 28)) == (date(2024, 4, 28), date(2024, 5, 4))

    def test_add_months_across_years(self):
        assert add_months(date(2024, 1, 31), -1) == date(2023, 12, 1)
        assert add_months(date(2024, 12, 5), 1) == date(2025, 1, 1)

    def test_month_grid(self):
        grid = month_grid(date(2024, 5, 17))
        assert len(grid) == 42
        assert grid[0] == date(2024, 4, 28)
        assert grid[0].weekday() == 6
        assert date(2024, 5, 1) in grid and date(2024, 5, 31) in grid
        assert grid[-1] == date(2024, 6, 8)


class TestFormatting:
    def test_is_same_day(self):
        assert is_same_day(datetime(2024, 5, 1, 23, 59), "2024-05-01")
        assert not is_same_day(date(2024, 5, 1), date(2024, 5, 2))

    def test_format_date(self):
        assert format_date(date(2024, 5, 1)) == "May 1, 2024"
        assert format_month_year(date(2024, 5, 1)) == "May 2024"

    def test_format_date_full_uses_the_long_month_name(self):
        assert format_date(date(2024, 9, 3)) == "Sep 3, 2024"
        assert format_date_full(date(2024, 9, 3)) == "September 3, 2024"

    def test_format_currency(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(0) == "$0.00"
