"""Configuration management for Sprint Tracker."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

import tomli_w

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


def get_config_dir() -> Path:
    """Get the configuration directory path.

    ``SPRINT_TRACKER_HOME`` overrides the default ``~/.sprint-tracker``.
    """
    override = os.environ.get("SPRINT_TRACKER_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".sprint-tracker"


def get_config_path() -> Path:
    """Get the configuration file path."""
    return get_config_dir() / "config.toml"


def _default_data_file() -> Path:
    return get_config_dir() / "data.json"


@dataclass
class Config:
    """Tracker, logging and optional JIRA settings."""

    data_file: Path = field(default_factory=_default_data_file)
    work_day_hours: float = 8
    sprint_days: int = 10
    log_level: str = "INFO"
    log_format: str = "console"
    jira_url: str | None = None
    jira_email: str | None = None
    jira_api_token: str | None = None

    @property
    def jira_enabled(self) -> bool:
        return bool(self.jira_url and self.jira_email and self.jira_api_token)

    def validate(self) -> list[str]:
        """Validate configuration values. Returns list of error messages."""
        errors: list[str] = []

        if not isinstance(self.work_day_hours, (int, float)) or self.work_day_hours <= 0:
            errors.append("work_day_hours must be a positive number")
        if not isinstance(self.sprint_days, int) or self.sprint_days <= 0:
            errors.append("sprint_days must be a positive integer")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"Log level must be one of: {', '.join(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            errors.append(f"Log format must be one of: {', '.join(LOG_FORMATS)}")

        if self.jira_url or self.jira_email or self.jira_api_token:
            if not self.jira_url:
                errors.append("JIRA URL is required")
            else:
                parsed = urlparse(self.jira_url)
                if parsed.scheme not in ("http", "https"):
                    errors.append("JIRA URL must start with http:// or https://")
                if not parsed.netloc:
                    errors.append("JIRA URL must include a domain")

            if not self.jira_email:
                errors.append("JIRA email is required")
            elif "@" not in self.jira_email:
                errors.append("JIRA email must be a valid email address")

            if not self.jira_api_token:
                errors.append("JIRA API token is required")

        return errors


def config_exists() -> bool:
    """Check if configuration file exists."""
    return get_config_path().exists()


def load_config() -> Config:
    """Load configuration from TOML file, falling back to defaults.

    Raises:
        ValueError: If config is invalid
    """
    config_path = get_config_path()

    if not config_path.exists():
        return Config()

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    tracker_section = data.get("tracker", {})
    logging_section = data.get("logging", {})
    jira_section = data.get("jira", {})

    data_file = tracker_section.get("data_file")

    config = Config(
        data_file=Path(data_file).expanduser() if data_file else _default_data_file(),
        work_day_hours=tracker_section.get("work_day_hours", 8),
        sprint_days=tracker_section.get("sprint_days", 10),
        log_level=logging_section.get("level", "INFO"),
        log_format=logging_section.get("format", "console"),
        jira_url=jira_section.get("url"),
        jira_email=jira_section.get("email"),
        jira_api_token=jira_section.get("api_token"),
    )

    errors = config.validate()
    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    return config


def save_config(config: Config) -> None:
    """Save configuration to TOML file."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    config_path = get_config_path()

    data: dict = {
        "tracker": {
            "data_file": str(config.data_file),
            "work_day_hours": config.work_day_hours,
            "sprint_days": config.sprint_days,
        },
        "logging": {
            "level": config.log_level,
            "format": config.log_format,
        },
    }

    if config.jira_enabled:
        data["jira"] = {
            "url": config.jira_url,
            "email": config.jira_email,
            "api_token": config.jira_api_token,
        }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
