"""JIRA API client with retry logic."""

from jira import JIRA, JIRAError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from sprint_tracker.config import Config
from sprint_tracker.logging import get_logger

logger = get_logger(__name__)


class RateLimitError(Exception):
    """Raised when JIRA API rate limit is hit."""

    pass


class AuthenticationError(Exception):
    """Raised when JIRA authentication fails."""

    pass


class ConnectionError(Exception):
    """Raised when JIRA server cannot be reached."""

    pass


class JiraClient:
    """Client for looking up issues in JIRA Cloud."""

    def __init__(self, config: Config) -> None:
        """Initialize JIRA client with configuration."""
        self.config = config
        self._client: JIRA | None = None

    def _get_client(self) -> JIRA:
        """Get or create JIRA client instance."""
        if self._client is None:
            try:
                self._client = JIRA(
                    server=self.config.jira_url,
                    basic_auth=(self.config.jira_email, self.config.jira_api_token),
                    timeout=15,
                )
            except JIRAError as e:
                if e.status_code == 401:
                    raise AuthenticationError(
                        "Authentication failed. Check your email and API token."
                    ) from e
                raise
            except Exception as e:
                error_msg = str(e).lower()
                if "connection" in error_msg or "resolve" in error_msg or "timeout" in error_msg:
                    raise ConnectionError(
                        f"Cannot connect to JIRA server at {self.config.jira_url}. "
                        "Check the URL and your network connection."
                    ) from e
                raise
        return self._client

    @retry(
        retry=retry_if_exception_type(RateLimitError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=60),
        reraise=True,
    )
    def get_issue_summaries(self, keys: list[str]) -> dict[str, str]:
        """Fetch the summary line of each issue key.

        Args:
            keys: Issue keys such as "PROJ-1"

        Returns:
            Dict mapping issue key → summary. Keys JIRA cannot resolve map
            to themselves.

        Raises:
            RateLimitError: If rate limited (will be retried)
            AuthenticationError: If authentication fails
            JIRAError: For other JIRA API errors
        """
        if not keys:
            return {}

        client = self._get_client()
        jql = "key in (" + ", ".join(sorted(set(keys))) + ")"

        try:
            issues = client.enhanced_search_issues(jql, maxResults=0, fields=["summary"])
            found = {issue.key: issue.fields.summary for issue in issues}
        except JIRAError as e:
            if e.status_code == 429:
                raise RateLimitError(
                    "Rate limited by JIRA. Retrying with exponential backoff..."
                ) from e
            if e.status_code == 401:
                raise AuthenticationError(
                    "Authentication failed. Check your email and API token."
                ) from e
            if e.status_code != 400:
                raise
            # JQL rejects the whole query when any key does not exist
            logger.debug("jira_bulk_lookup_rejected", keys=keys, error=e.text)
            found = self._get_summaries_one_by_one(client, keys)

        return {key: found.get(key, key) for key in keys}

    def _get_summaries_one_by_one(self, client: JIRA, keys: list[str]) -> dict[str, str]:
        result: dict[str, str] = {}
        for key in keys:
            try:
                result[key] = client.issue(key, fields="summary").fields.summary
            except JIRAError:
                result[key] = key  # graceful fallback
        return result
