"""
Tests for due-date parsing and day keys.
"""

from datetime import date

from mona import dates


class TestParseDue:
    """MM/DD parsing against an implicit year."""

    def test_valid_due(self):
        assert dates.parse_due("03/15", 2026) == date(2026, 3, 15)

    def test_single_digit_parts(self):
        assert dates.parse_due("3/5", 2026) == date(2026, 3, 5)

    def test_defaults_to_current_year(self):
        assert dates.parse_due("01/01") == date(date.today().year, 1, 1)

    def test_invalid_month_and_day_rejected(self):
        assert dates.parse_due("13/40", 2026) is None

    def test_nonexistent_day_not_rolled_over(self):
        """02/30 is not silently turned into March 2nd."""
        assert dates.parse_due("02/30", 2026) is None

    def test_leap_day_depends_on_year(self):
        assert dates.parse_due("02/29", 2024) == date(2024, 2, 29)
        assert dates.parse_due("02/29", 2026) is None

    def test_garbage(self):
        for value in ("", None, "soon", "03", "aa/bb", "/"):
            assert dates.parse_due(value, 2026) is None


class TestDayKeys:
    def test_round_trip_through_due(self):
        assert dates.day_key(date(2026, 3, 15)) == "2026-03-15"
        assert dates.due_from_day_key("2026-03-15") == "03/15"

    def test_unparseable_sorts_last(self):
        assert dates.due_sort_key("nope", 2026) == dates.FAR_FUTURE
        assert dates.due_sort_key("12/31", 2026) < dates.FAR_FUTURE


class TestWeeks:
    def test_week_dates_is_monday_to_friday(self):
        week = dates.week_dates(date(2026, 10, 21))  # a Wednesday
        assert week[0] == date(2026, 10, 19)
        assert week[-1] == date(2026, 10, 23)
        assert len(week) == 5

    def test_month_grid_has_only_weekdays(self):
        grid = dates.weekday_month_grid(date(2026, 3, 10))
        assert len(grid) % 5 == 0
        assert all(day.weekday() < 5 for day, _ in grid)

    def test_month_grid_covers_every_weekday_of_month(self):
        grid = dates.weekday_month_grid(date(2026, 3, 10))
        in_month = [day for day, inside in grid if inside]
        expected = [
            date(2026, 3, d) for d in range(1, 32) if date(2026, 3, d).weekday() < 5
        ]
        assert in_month == expected

    def test_month_grid_drops_rows_outside_month(self):
        """Every row holds at least one day of the month."""
        grid = dates.weekday_month_grid(date(2026, 2, 1))
        rows = [grid[i : i + 5] for i in range(0, len(grid), 5)]
        assert all(any(inside for _, inside in row) for row in rows)
