"""Persistence of sprints, entries and the current sprint in a key-value store."""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Protocol

from sprint_tracker.exceptions import InvalidDateError, StorageError
from sprint_tracker.models import Sprint, TimeEntry
from sprint_tracker.workdays import format_date, parse_date

SPRINTS_KEY = "timeTrackerSprints"
ENTRIES_KEY = "timeTrackerEntries"
CURRENT_SPRINT_KEY = "timeTrackerCurrentSprint"


class KeyValueStore(Protocol):
    """String-keyed storage of string values."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStore:
    """Key-value store held in a dict. Nothing survives the process."""

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileKeyValueStore:
    """Key-value store persisted as a single JSON object file.

    The file is read once on construction and replaced on every ``set``.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()
        self._data = self._read()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read data file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Data file {self.path} does not contain a JSON object")
        return data

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Replaced atomically; the data file is never left half-written
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise


def sprint_to_dict(sprint: Sprint) -> dict:
    """Convert a Sprint to its persisted (camelCase) form."""
    return {
        "id": sprint.id,
        "name": sprint.name,
        "startDate": format_date(sprint.start_date),
        "endDate": format_date(sprint.end_date),
        "createdAt": sprint.created_at.isoformat(),
    }


def entry_to_dict(entry: TimeEntry) -> dict:
    """Convert a TimeEntry to its persisted (camelCase) form."""
    return {
        "id": entry.id,
        "date": format_date(entry.date),
        "jiraId": entry.jira_id,
        "timeSpent": entry.time_spent,
        "workDone": entry.work_done,
        "sprintId": entry.sprint_id,
        "timestamp": entry.timestamp.isoformat(),
    }


def sprint_from_dict(data: dict) -> Sprint:
    """Build a Sprint from its persisted form."""
    try:
        return Sprint(
            id=int(data["id"]),
            name=str(data["name"]),
            start_date=parse_date(data["startDate"]),
            end_date=parse_date(data["endDate"]),
            created_at=datetime.fromisoformat(data["createdAt"]),
        )
    except (KeyError, TypeError, ValueError, InvalidDateError) as e:
        raise StorageError(f"Malformed sprint record: {data!r}") from e


def entry_from_dict(data: dict) -> TimeEntry:
    """Build a TimeEntry from its persisted form."""
    try:
        return TimeEntry(
            id=int(data["id"]),
            date=parse_date(data["date"]),
            jira_id=str(data["jiraId"]),
            time_spent=float(data["timeSpent"]),
            work_done=str(data["workDone"]),
            sprint_id=int(data["sprintId"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )
    except (KeyError, TypeError, ValueError, InvalidDateError) as e:
        raise StorageError(f"Malformed entry record: {data!r}") from e


class Store:
    """Reads and writes tracker records through a KeyValueStore."""

    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    def _load_json(self, key: str):
        raw = self.backend.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Stored value for {key} is not valid JSON") from e

    def _load_list(self, key: str) -> list:
        data = self._load_json(key)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StorageError(f"Stored value for {key} is not a list")
        return data

    def load_sprints(self) -> list[Sprint]:
        return [sprint_from_dict(item) for item in self._load_list(SPRINTS_KEY)]

    def load_entries(self) -> list[TimeEntry]:
        return [entry_from_dict(item) for item in self._load_list(ENTRIES_KEY)]

    def load_current_sprint(self) -> Sprint | None:
        data = self._load_json(CURRENT_SPRINT_KEY)
        if data is None:
            return None
        return sprint_from_dict(data)

    def save_sprints(self, sprints: list[Sprint]) -> None:
        self.backend.set(SPRINTS_KEY, json.dumps([sprint_to_dict(s) for s in sprints]))

    def save_entries(self, entries: list[TimeEntry]) -> None:
        self.backend.set(ENTRIES_KEY, json.dumps([entry_to_dict(e) for e in entries]))

    def save_current_sprint(self, sprint: Sprint | None) -> None:
        data = sprint_to_dict(sprint) if sprint is not None else None
        self.backend.set(CURRENT_SPRINT_KEY, json.dumps(data))
