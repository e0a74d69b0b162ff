"""Tests for working-day date arithmetic."""

from datetime import date, datetime, timedelta

import pytest

from sprint_tracker.exceptions import InvalidDateError, SprintStartNotWorkingDayError
from sprint_tracker.workdays import (
    calculate_sprint_end_date,
    count_working_days,
    format_date,
    is_working_day,
    parse_date,
)


class TestParseDate:
    """Tests for parse_date and format_date."""

    def test_parses_iso_string(self):
        assert parse_date("2025-01-06") == date(2025, 1, 6)

    def test_truncates_timestamp(self):
        assert parse_date("2025-01-06T10:30:00.000Z") == date(2025, 1, 6)

    def test_accepts_date_and_datetime(self):
        assert parse_date(date(2025, 1, 6)) == date(2025, 1, 6)
        assert parse_date(datetime(2025, 1, 6, 23, 59)) == date(2025, 1, 6)

    def test_rejects_garbage(self):
        with pytest.raises(InvalidDateError):
            parse_date("next tuesday")

    @pytest.mark.parametrize("text", ["2025-01-07junk", "2025-01-07x10:00", "2025-01-07T99:00"])
    def test_rejects_trailing_garbage(self, text):
        with pytest.raises(InvalidDateError):
            parse_date(text)

    def test_accepts_space_separated_timestamp(self):
        assert parse_date("2025-01-06 10:30:00") == date(2025, 1, 6)

    def test_rejects_none(self):
        with pytest.raises(InvalidDateError):
            parse_date(None)

    def test_format_date(self):
        assert format_date(date(2025, 1, 6)) == "2025-01-06"
        assert format_date(" 2025-01-06 ") == "2025-01-06"


class TestIsWorkingDay:
    """Tests for is_working_day."""

    def test_weekdays(self):
        # 2025-01-06 is a Monday
        for offset in range(5):
            assert is_working_day(date(2025, 1, 6) + timedelta(days=offset))

    def test_weekend(self):
        assert not is_working_day("2025-01-11")
        assert not is_working_day("2025-01-12")


class TestCalculateSprintEndDate:
    """Tests for calculate_sprint_end_date."""

    def test_monday_start(self):
        assert calculate_sprint_end_date("2025-01-06") == date(2025, 1, 17)

    def test_friday_start_spans_two_weekends(self):
        assert calculate_sprint_end_date("2025-01-10") == date(2025, 1, 23)

    def test_custom_length(self):
        assert calculate_sprint_end_date("2025-01-06", sprint_days=1) == date(2025, 1, 6)
        assert calculate_sprint_end_date("2025-01-06", sprint_days=5) == date(2025, 1, 10)

    @pytest.mark.parametrize("start", ["2025-01-11", "2025-01-12"])
    def test_rejects_weekend_start(self, start):
        with pytest.raises(SprintStartNotWorkingDayError, match="working day"):
            calculate_sprint_end_date(start)

    def test_end_is_tenth_working_day_for_every_start(self):
        start = date(2025, 1, 1)
        for offset in range(90):
            day = start + timedelta(days=offset)
            if not is_working_day(day):
                continue
            end = calculate_sprint_end_date(day)
            assert end >= day
            assert count_working_days(day, end) == 10
            assert count_working_days(day, end - timedelta(days=1)) == 9


class TestCountWorkingDays:
    """Tests for count_working_days."""

    def test_full_week(self):
        assert count_working_days("2025-01-06", "2025-01-12") == 5

    def test_weekend_only(self):
        assert count_working_days("2025-01-11", "2025-01-12") == 0

    def test_end_before_start(self):
        assert count_working_days("2025-01-10", "2025-01-06") == 0
