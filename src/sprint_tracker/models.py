"""Data models for Sprint Tracker."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class Sprint:
    """A fixed-length period that time entries are logged against."""

    id: int
    name: str
    start_date: date
    end_date: date
    created_at: datetime


@dataclass
class TimeEntry:
    """Hours spent on one Jira issue on one working day."""

    id: int
    date: date
    jira_id: str
    time_spent: float  # hours
    work_done: str
    sprint_id: int
    timestamp: datetime


@dataclass
class DayStats:
    """Logged time for a single date against the workday target."""

    date: date
    total_time: float
    remaining_time: float
    progress: float  # percent, clamped to 100


@dataclass
class SprintSummary:
    """Aggregate statistics for the current sprint."""

    total_entries: int
    total_time: float
    unique_dates: int  # working days with at least one entry
    average_time_per_day: float
    days_remaining: int
    progress: float
    sprint_name: str


@dataclass
class Summary:
    """Aggregate statistics across all entries."""

    total_entries: int
    total_time: float
    unique_dates: int
    average_time_per_day: float
    total_sprints: int


@dataclass
class IssueTime:
    """Hours logged against one Jira issue."""

    jira_id: str
    total_time: float
    entries: int
    summary: str | None = None
