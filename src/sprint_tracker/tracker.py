"""Sprint and time entry business logic."""

import math
from collections.abc import Callable
from datetime import date, datetime

from sprint_tracker.exceptions import (
    DateOutsideSprintError,
    InvalidDateError,
    InvalidTimeSpentError,
    MissingFieldError,
    NoActiveSprintError,
    NonWorkingDayError,
)
from sprint_tracker.logging import get_logger
from sprint_tracker.models import (
    DayStats,
    IssueTime,
    Sprint,
    SprintSummary,
    Summary,
    TimeEntry,
)
from sprint_tracker.store import Store
from sprint_tracker.workdays import (
    calculate_sprint_end_date,
    count_working_days,
    format_date,
    is_working_day,
    parse_date,
)

logger = get_logger(__name__)

WORK_DAY_HOURS = 8
SPRINT_DAYS = 10
NO_SPRINT_NAME = "No Sprint Selected"


def _is_blank(value) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _is_missing_text(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def _sum_time(entries: list[TimeEntry]) -> float:
    return sum(entry.time_spent for entry in entries)


class Tracker:
    """Owns sprints, entries and the current sprint, persisting every change.

    All records are read from the store on construction and kept in memory;
    the store is only written to, never re-read.
    """

    def __init__(
        self,
        store: Store,
        *,
        work_day_hours: float = WORK_DAY_HOURS,
        sprint_days: int = SPRINT_DAYS,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.work_day_hours = work_day_hours
        self.sprint_days = sprint_days
        self.sprint_total_hours = work_day_hours * sprint_days
        self._today = today
        self._now = now

        self.sprints: list[Sprint] = store.load_sprints()
        self.entries: list[TimeEntry] = store.load_entries()
        self.current_sprint: Sprint | None = store.load_current_sprint()

        self._last_id = max(
            [s.id for s in self.sprints] + [e.id for e in self.entries], default=0
        )

    def _next_id(self, created: datetime) -> int:
        """Millisecond timestamp id, bumped past the last id handed out."""
        new_id = int(created.timestamp() * 1000)
        if new_id <= self._last_id:
            new_id = self._last_id + 1
        self._last_id = new_id
        return new_id

    # -------- Sprint lifecycle --------

    def create_sprint(
        self, name: str, start_date: date | str, end_date: date | str | None = None
    ) -> Sprint:
        """Create and persist a sprint.

        When ``end_date`` is omitted it is calculated as the 10th working day.

        Raises:
            MissingFieldError: If the name is blank or not text
            InvalidDateError: If a date cannot be parsed
            SprintStartNotWorkingDayError: If the end date must be calculated
                and the start date is a weekend
        """
        if _is_missing_text(name):
            raise MissingFieldError("Sprint name is required")

        start = parse_date(start_date)
        end = parse_date(end_date) if end_date else self.calculate_sprint_end_date(start)

        created = self._now()
        sprint = Sprint(
            id=self._next_id(created),
            name=name.strip(),
            start_date=start,
            end_date=end,
            created_at=created,
        )
        self.sprints.append(sprint)
        self.store.save_sprints(self.sprints)
        logger.info(
            "sprint_created",
            sprint_id=sprint.id,
            name=sprint.name,
            start_date=format_date(start),
            end_date=format_date(end),
        )
        return sprint

    def get_sprint(self, sprint_id: int) -> Sprint | None:
        return next((s for s in self.sprints if s.id == sprint_id), None)

    def get_current_sprint(self) -> Sprint | None:
        return self.current_sprint

    def set_current_sprint(self, sprint_id: int) -> bool:
        """Select a sprint as current. Returns False if no sprint has that id."""
        sprint = self.get_sprint(sprint_id)
        if sprint is None:
            return False
        self.current_sprint = sprint
        self.store.save_current_sprint(sprint)
        logger.info("sprint_selected", sprint_id=sprint_id, name=sprint.name)
        return True

    def calculate_sprint_end_date(self, start_date: date | str) -> date:
        """Last day of a sprint starting on ``start_date``.

        Raises:
            SprintStartNotWorkingDayError: If the start date is a weekend
        """
        return calculate_sprint_end_date(start_date, self.sprint_days)

    def recalculate_all_sprint_end_dates(self) -> int:
        """Reset every sprint's end date to the calculated one.

        Repairs sprints saved with a miscalculated length. Sprints that start
        on a weekend have no calculated end date and are left alone.

        Returns:
            Number of sprints whose end date changed
        """
        updated = 0
        for sprint in self.sprints:
            if not is_working_day(sprint.start_date):
                logger.warning(
                    "sprint_end_date_not_recalculated",
                    sprint_id=sprint.id,
                    name=sprint.name,
                    start_date=format_date(sprint.start_date),
                )
                continue
            new_end = self.calculate_sprint_end_date(sprint.start_date)
            if sprint.end_date != new_end:
                logger.info(
                    "sprint_end_date_corrected",
                    sprint_id=sprint.id,
                    name=sprint.name,
                    old_end_date=format_date(sprint.end_date),
                    new_end_date=format_date(new_end),
                )
                sprint.end_date = new_end
                updated += 1

        if updated > 0:
            self.store.save_sprints(self.sprints)
            if self.current_sprint is not None:
                refreshed = self.get_sprint(self.current_sprint.id)
                if refreshed is not None:
                    self.current_sprint = refreshed
                    self.store.save_current_sprint(refreshed)

        return updated

    # -------- Entries --------

    def add_entry(
        self,
        entry_date: date | str,
        jira_id: str,
        time_spent: float | str,
        work_done: str,
        allow_past_entry: bool = False,
    ) -> TimeEntry:
        """Validate and persist a time entry for the current sprint.

        ``allow_past_entry`` is set once the current sprint is over. The date
        must still fall within the current sprint.

        Raises:
            MissingFieldError: If any field is missing or blank
            InvalidTimeSpentError: If time spent is not a positive number
            NoActiveSprintError: If no sprint is selected
            InvalidDateError: If the date cannot be parsed
            NonWorkingDayError: If the date is a Saturday or Sunday
            DateOutsideSprintError: If the date is outside the sprint
        """
        if (
            _is_blank(entry_date)
            or _is_blank(time_spent)
            or _is_missing_text(jira_id)
            or _is_missing_text(work_done)
        ):
            raise MissingFieldError(
                "All fields are required: date, Jira ID, time spent, and work done"
            )

        try:
            hours = float(time_spent)
        except (TypeError, ValueError):
            hours = math.nan
        if isinstance(time_spent, bool) or not math.isfinite(hours) or hours <= 0:
            raise InvalidTimeSpentError("Time spent must be a positive number")

        if self.current_sprint is None:
            raise NoActiveSprintError(
                "No active sprint selected. Please create or select a sprint first."
            )

        day = parse_date(entry_date)
        if not is_working_day(day):
            raise NonWorkingDayError(
                "Time entries can only be added for working days (Monday to Friday)"
            )

        if not allow_past_entry and not self.is_date_in_current_sprint(day):
            raise DateOutsideSprintError(
                "Date must be within the current sprint period and on a working day"
            )
        if allow_past_entry and not self.is_date_in_sprint_period(day, self.current_sprint):
            raise DateOutsideSprintError(
                "Date must be within the selected sprint period and on a working day"
            )

        created = self._now()
        entry = TimeEntry(
            id=self._next_id(created),
            date=day,
            jira_id=jira_id.strip(),
            time_spent=hours,
            work_done=work_done.strip(),
            sprint_id=self.current_sprint.id,
            timestamp=created,
        )
        self.entries.append(entry)
        self.store.save_entries(self.entries)
        logger.info(
            "entry_added",
            entry_id=entry.id,
            sprint_id=entry.sprint_id,
            jira_id=entry.jira_id,
            date=format_date(day),
            time_spent=hours,
        )
        return entry

    def delete_entry(self, entry_id: int) -> bool:
        """Remove an entry. Returns False if no entry has that id."""
        for index, entry in enumerate(self.entries):
            if entry.id == entry_id:
                del self.entries[index]
                self.store.save_entries(self.entries)
                logger.info("entry_deleted", entry_id=entry_id)
                return True
        return False

    def clear_sprint_entries(self, sprint_id: int) -> int:
        """Remove every entry of a sprint. Returns the number removed."""
        kept = [e for e in self.entries if e.sprint_id != sprint_id]
        removed = len(self.entries) - len(kept)
        if removed:
            self.entries = kept
            self.store.save_entries(self.entries)
            logger.info("sprint_entries_cleared", sprint_id=sprint_id, removed=removed)
        return removed

    def clear_all_entries(self) -> None:
        self.entries = []
        self.store.save_entries(self.entries)
        logger.info("entries_cleared")

    def clear_all_data(self) -> None:
        self.entries = []
        self.sprints = []
        self.current_sprint = None
        self.store.save_entries(self.entries)
        self.store.save_sprints(self.sprints)
        self.store.save_current_sprint(None)
        logger.info("data_cleared")

    def get_entries_for_date(self, entry_date: date | str) -> list[TimeEntry]:
        day = parse_date(entry_date)
        return [e for e in self.entries if e.date == day]

    def get_sprint_entries(self, sprint_id: int) -> list[TimeEntry]:
        return [e for e in self.entries if e.sprint_id == sprint_id]

    def get_current_sprint_entries(self) -> list[TimeEntry]:
        if self.current_sprint is None:
            return []
        return self.get_sprint_entries(self.current_sprint.id)

    def get_entries_by_date(self) -> dict[str, list[TimeEntry]]:
        """Group all entries by their "YYYY-MM-DD" date, in insertion order."""
        grouped: dict[str, list[TimeEntry]] = {}
        for entry in self.entries:
            grouped.setdefault(format_date(entry.date), []).append(entry)
        return grouped

    # -------- Date predicates --------

    def is_date_in_sprint_period(self, check_date: date | str, sprint: Sprint | None) -> bool:
        """True if the date is a working day within the sprint, bounds included."""
        if sprint is None:
            return False
        try:
            day = parse_date(check_date)
        except InvalidDateError:
            return False
        return sprint.start_date <= day <= sprint.end_date and is_working_day(day)

    def is_date_in_current_sprint(self, check_date: date | str) -> bool:
        return self.is_date_in_sprint_period(check_date, self.current_sprint)

    def is_current_sprint_over(self) -> bool:
        if self.current_sprint is None:
            return False
        return self._today() > self.current_sprint.end_date

    def get_current_sprint_days_remaining(self) -> int:
        """Working days from today through the sprint end date, inclusive."""
        if self.current_sprint is None:
            return 0
        today = self._today()
        if today > self.current_sprint.end_date:
            return 0
        return count_working_days(today, self.current_sprint.end_date)

    # -------- Aggregation --------

    def get_total_time_for_date(self, entry_date: date | str) -> float:
        return _sum_time(self.get_entries_for_date(entry_date))

    def get_remaining_time_for_date(self, entry_date: date | str) -> float:
        return max(0, self.work_day_hours - self.get_total_time_for_date(entry_date))

    def get_progress_for_date(self, entry_date: date | str) -> float:
        total = self.get_total_time_for_date(entry_date)
        return min(100, total * 100 / self.work_day_hours)

    def get_day_stats(self, entry_date: date | str) -> DayStats:
        return DayStats(
            date=parse_date(entry_date),
            total_time=self.get_total_time_for_date(entry_date),
            remaining_time=self.get_remaining_time_for_date(entry_date),
            progress=self.get_progress_for_date(entry_date),
        )

    def get_current_sprint_total_time(self) -> float:
        return _sum_time(self.get_current_sprint_entries())

    def get_current_sprint_remaining_time(self) -> float:
        return max(0, self.sprint_total_hours - self.get_current_sprint_total_time())

    def get_current_sprint_progress(self) -> float:
        total = self.get_current_sprint_total_time()
        return min(100, total * 100 / self.sprint_total_hours)

    def get_current_sprint_summary(self) -> SprintSummary:
        """Statistics for the current sprint.

        Averages are taken over working days that have at least one entry.
        """
        entries = self.get_current_sprint_entries()
        total_time = _sum_time(entries)
        working_dates = {e.date for e in entries if is_working_day(e.date)}
        average = total_time / len(working_dates) if working_dates else 0

        return SprintSummary(
            total_entries=len(entries),
            total_time=round(total_time, 2),
            unique_dates=len(working_dates),
            average_time_per_day=round(average, 2),
            days_remaining=self.get_current_sprint_days_remaining(),
            progress=round(self.get_current_sprint_progress(), 1),
            sprint_name=self.current_sprint.name if self.current_sprint else NO_SPRINT_NAME,
        )

    def get_summary(self) -> Summary:
        """Statistics across all entries of all sprints."""
        total_time = _sum_time(self.entries)
        unique_dates = {e.date for e in self.entries}
        average = total_time / len(unique_dates) if unique_dates else 0

        return Summary(
            total_entries=len(self.entries),
            total_time=round(total_time, 2),
            unique_dates=len(unique_dates),
            average_time_per_day=round(average, 2),
            total_sprints=len(self.sprints),
        )

    def get_current_sprint_time_by_issue(self) -> list[IssueTime]:
        """Hours per Jira issue in the current sprint, largest first."""
        by_issue: dict[str, IssueTime] = {}
        for entry in self.get_current_sprint_entries():
            item = by_issue.setdefault(
                entry.jira_id, IssueTime(jira_id=entry.jira_id, total_time=0, entries=0)
            )
            item.total_time += entry.time_spent
            item.entries += 1

        for item in by_issue.values():
            item.total_time = round(item.total_time, 2)

        return sorted(by_issue.values(), key=lambda i: (-i.total_time, i.jira_id))
