"""Working-day and sprint date arithmetic."""

from datetime import date, datetime, timedelta

from sprint_tracker.exceptions import InvalidDateError, SprintStartNotWorkingDayError

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: date | str) -> date:
    """Parse a date or "YYYY-MM-DD" string into a date object.

    Datetime values and ISO timestamps are truncated to their calendar date.

    Raises:
        InvalidDateError: If the value is not a recognisable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) > 10 and text[10] in "T ":
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except (ValueError, TypeError) as e:
        raise InvalidDateError(f"Invalid date {value!r}: expected YYYY-MM-DD") from e


def format_date(value: date | str) -> str:
    """Normalize a date or date string to "YYYY-MM-DD"."""
    return parse_date(value).strftime(DATE_FORMAT)


def is_working_day(value: date | str) -> bool:
    """Monday through Friday are working days."""
    return parse_date(value).weekday() < 5


def calculate_sprint_end_date(start_date: date | str, sprint_days: int = 10) -> date:
    """Return the date of the last working day of a sprint.

    The start date counts as working day 1; weekends are never counted.

    Raises:
        SprintStartNotWorkingDayError: If the start date is a Saturday or Sunday
    """
    current = parse_date(start_date)
    if not is_working_day(current):
        raise SprintStartNotWorkingDayError(
            "Sprint start date must be a working day (Monday-Friday)"
        )

    work_days = 1
    while work_days < sprint_days:
        current += timedelta(days=1)
        if is_working_day(current):
            work_days += 1

    return current


def count_working_days(start: date | str, end: date | str) -> int:
    """Count working days from start through end inclusive (0 if end < start)."""
    current = parse_date(start)
    last = parse_date(end)
    count = 0
    while current <= last:
        if is_working_day(current):
            count += 1
        current += timedelta(days=1)
    return count
