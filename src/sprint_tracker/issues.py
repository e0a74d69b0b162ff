"""Time per Jira issue, enriched with issue summaries from JIRA."""

from sprint_tracker.config import Config
from sprint_tracker.exceptions import (
    JiraAuthError,
    JiraConnectionError,
    JiraRateLimitError,
)
from sprint_tracker.jira_client import (
    AuthenticationError,
    JiraClient,
    RateLimitError,
)
from sprint_tracker.jira_client import (
    ConnectionError as JiraClientConnectionError,
)
from sprint_tracker.models import IssueTime
from sprint_tracker.tracker import Tracker


def fetch_issue_times(tracker: Tracker, config: Config) -> list[IssueTime]:
    """Hours per issue in the current sprint with JIRA summaries attached.

    Without JIRA settings the summaries are left empty.

    Raises:
        JiraAuthError: If JIRA authentication fails
        JiraRateLimitError: If rate limited
        JiraConnectionError: If cannot connect
    """
    issue_times = tracker.get_current_sprint_time_by_issue()
    if not issue_times or not config.jira_enabled:
        return issue_times

    client = JiraClient(config)
    try:
        summaries = client.get_issue_summaries([i.jira_id for i in issue_times])
    except AuthenticationError:
        raise JiraAuthError(
            "JIRA authentication failed. Check your credentials in "
            "~/.sprint-tracker/config.toml."
        )
    except RateLimitError:
        raise JiraRateLimitError(
            "JIRA rate limit exceeded. Please wait a moment and try again."
        )
    except JiraClientConnectionError as e:
        raise JiraConnectionError(str(e))

    for item in issue_times:
        item.summary = summaries.get(item.jira_id)
    return issue_times
