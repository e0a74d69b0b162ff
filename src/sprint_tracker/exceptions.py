"""Exception hierarchy for Sprint Tracker."""


class TrackerError(Exception):
    """Base exception for tracker errors."""

    pass


class TrackerValidationError(TrackerError):
    """Input rejected before any state was changed."""

    pass


class MissingFieldError(TrackerValidationError):
    """A required field is missing or blank."""

    pass


class InvalidTimeSpentError(TrackerValidationError):
    """Time spent is not a positive number."""

    pass


class NoActiveSprintError(TrackerValidationError):
    """No current sprint is selected."""

    pass


class InvalidDateError(TrackerValidationError):
    """Date cannot be parsed as YYYY-MM-DD."""

    pass


class NonWorkingDayError(TrackerValidationError):
    """Date falls on a Saturday or Sunday."""

    pass


class DateOutsideSprintError(TrackerValidationError):
    """Date is outside the sprint period."""

    pass


class SprintStartNotWorkingDayError(TrackerValidationError):
    """Sprint start date falls on a weekend."""

    pass


class StorageError(TrackerError):
    """Persisted data cannot be read."""

    pass


class InvalidConfigError(TrackerError):
    """Configuration is invalid."""

    pass


class JiraAuthError(TrackerError):
    """JIRA authentication failed."""

    pass


class JiraConnectionError(TrackerError):
    """Cannot connect to JIRA server."""

    pass


class JiraRateLimitError(TrackerError):
    """JIRA rate limit exceeded."""

    pass
