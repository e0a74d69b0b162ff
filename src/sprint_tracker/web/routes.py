"""HTTP route handlers for Sprint Tracker web interface."""

from flask import Blueprint, current_app, jsonify, request

from sprint_tracker.config import Config, config_exists
from sprint_tracker.exceptions import (
    JiraAuthError,
    JiraConnectionError,
    JiraRateLimitError,
    TrackerValidationError,
)
from sprint_tracker.issues import fetch_issue_times
from sprint_tracker.logging import get_logger
from sprint_tracker.models import DayStats, IssueTime, SprintSummary, Summary
from sprint_tracker.store import entry_to_dict, sprint_to_dict
from sprint_tracker.tracker import Tracker
from sprint_tracker.workdays import format_date

logger = get_logger(__name__)

bp = Blueprint("main", __name__)


def _tracker() -> Tracker:
    return current_app.extensions["sprint_tracker"]


def _config() -> Config:
    return current_app.extensions["sprint_tracker_config"]


def _payload() -> dict:
    return request.get_json(silent=True) or request.form.to_dict()


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _flag(data: dict, key: str, default: bool) -> bool:
    """Read a boolean from JSON (true/false) or form ("true", "0", "on", ...) input."""
    if key not in data:
        return default
    value = data[key]
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _sprint_summary_dict(s: SprintSummary) -> dict:
    return {
        "totalEntries": s.total_entries,
        "totalTime": s.total_time,
        "uniqueDates": s.unique_dates,
        "averageTimePerDay": s.average_time_per_day,
        "daysRemaining": s.days_remaining,
        "progress": s.progress,
        "sprintName": s.sprint_name,
    }


def _summary_dict(s: Summary) -> dict:
    return {
        "totalEntries": s.total_entries,
        "totalTime": s.total_time,
        "uniqueDates": s.unique_dates,
        "averageTimePerDay": s.average_time_per_day,
        "totalSprints": s.total_sprints,
    }


def _day_stats_dict(d: DayStats) -> dict:
    return {
        "date": format_date(d.date),
        "totalTime": d.total_time,
        "remainingTime": d.remaining_time,
        "progress": d.progress,
    }


def _issue_time_dict(i: IssueTime) -> dict:
    return {
        "jiraId": i.jira_id,
        "totalTime": i.total_time,
        "entries": i.entries,
        "summary": i.summary,
    }


@bp.route("/health")
def health():
    """Health check endpoint."""
    tracker = _tracker()
    return jsonify({
        "status": "ok",
        "config_loaded": config_exists(),
        "sprints": len(tracker.sprints),
        "entries": len(tracker.entries),
    })


# -------- Sprints --------

@bp.route("/api/sprints")
def list_sprints():
    """Return all sprints, newest first, and the current sprint id."""
    tracker = _tracker()
    current = tracker.get_current_sprint()
    return jsonify({
        "sprints": [sprint_to_dict(s) for s in reversed(tracker.sprints)],
        "currentSprintId": current.id if current else None,
    })


@bp.route("/api/sprints", methods=["POST"])
def create_sprint():
    """Create a sprint and, unless told otherwise, make it current."""
    tracker = _tracker()
    data = _payload()

    try:
        sprint = tracker.create_sprint(
            data.get("name"),
            data.get("startDate"),
            data.get("endDate") or None,
        )
    except TrackerValidationError as e:
        return _error(str(e), 400)

    if _flag(data, "select", True):
        tracker.set_current_sprint(sprint.id)

    return jsonify(sprint_to_dict(sprint)), 201


@bp.route("/api/sprints/end-date")
def sprint_end_date():
    """Calculate the end date for a sprint starting on ?startDate=."""
    start_date = request.args.get("startDate", "").strip()
    if not start_date:
        return _error("startDate is required.", 400)

    try:
        end_date = _tracker().calculate_sprint_end_date(start_date)
    except TrackerValidationError as e:
        return _error(str(e), 400)

    return jsonify({"startDate": format_date(start_date), "endDate": format_date(end_date)})


@bp.route("/api/sprints/<int:sprint_id>/select", methods=["POST"])
def select_sprint(sprint_id: int):
    """Make a sprint the current one."""
    tracker = _tracker()
    if not tracker.set_current_sprint(sprint_id):
        return _error(f"Sprint {sprint_id} not found.", 404)
    return jsonify(sprint_to_dict(tracker.get_current_sprint()))


@bp.route("/api/sprints/recalculate", methods=["POST"])
def recalculate_sprints():
    """Re-run the end date repair pass."""
    updated = _tracker().recalculate_all_sprint_end_dates()
    return jsonify({"updated": updated})


@bp.route("/api/sprints/current")
def current_sprint():
    """Return the current sprint with its progress."""
    tracker = _tracker()
    sprint = tracker.get_current_sprint()
    if sprint is None:
        return jsonify({"sprint": None})

    return jsonify({
        "sprint": sprint_to_dict(sprint),
        "isOver": tracker.is_current_sprint_over(),
        "daysRemaining": tracker.get_current_sprint_days_remaining(),
        "totalTime": tracker.get_current_sprint_total_time(),
        "remainingTime": tracker.get_current_sprint_remaining_time(),
        "progress": tracker.get_current_sprint_progress(),
        "targetHours": tracker.sprint_total_hours,
    })


@bp.route("/api/sprints/current/summary")
def current_sprint_summary():
    return jsonify(_sprint_summary_dict(_tracker().get_current_sprint_summary()))


@bp.route("/api/sprints/current/issues")
def current_sprint_issues():
    """Hours per Jira issue, with summaries when JIRA is configured."""
    tracker = _tracker()
    warning = None
    try:
        issue_times = fetch_issue_times(tracker, _config())
    except (JiraAuthError, JiraRateLimitError, JiraConnectionError) as e:
        logger.warning("jira_lookup_failed", error=str(e))
        warning = str(e)
        issue_times = tracker.get_current_sprint_time_by_issue()

    return jsonify({
        "issues": [_issue_time_dict(i) for i in issue_times],
        "warning": warning,
    })


@bp.route("/api/sprints/current/entries", methods=["DELETE"])
def clear_current_sprint_entries():
    """Delete every entry of the current sprint."""
    tracker = _tracker()
    sprint = tracker.get_current_sprint()
    if sprint is None:
        return _error("No active sprint selected.", 404)
    removed = tracker.clear_sprint_entries(sprint.id)
    return jsonify({"removed": removed})


# -------- Entries --------

@bp.route("/api/entries")
def list_entries():
    """Entries for ?date=, or the current sprint's entries newest first."""
    tracker = _tracker()
    entry_date = request.args.get("date", "").strip()

    if entry_date:
        try:
            entries = tracker.get_entries_for_date(entry_date)
        except TrackerValidationError as e:
            return _error(str(e), 400)
    else:
        entries = list(reversed(tracker.get_current_sprint_entries()))

    return jsonify([entry_to_dict(e) for e in entries])


@bp.route("/api/entries", methods=["POST"])
def add_entry():
    """Log time against the current sprint."""
    tracker = _tracker()
    data = _payload()

    allow_past_entry = _flag(data, "allowPastEntry", tracker.is_current_sprint_over())

    try:
        entry = tracker.add_entry(
            data.get("date"),
            data.get("jiraId"),
            data.get("timeSpent"),
            data.get("workDone"),
            allow_past_entry=allow_past_entry,
        )
    except TrackerValidationError as e:
        logger.info("entry_rejected", reason=str(e))
        return _error(str(e), 400)

    return jsonify(entry_to_dict(entry)), 201


@bp.route("/api/entries/<int:entry_id>", methods=["DELETE"])
def delete_entry(entry_id: int):
    if not _tracker().delete_entry(entry_id):
        return _error(f"Entry {entry_id} not found.", 404)
    return jsonify({"deleted": entry_id})


@bp.route("/api/entries", methods=["DELETE"])
def clear_entries():
    _tracker().clear_all_entries()
    return jsonify({"status": "ok"})


@bp.route("/api/data", methods=["DELETE"])
def clear_data():
    _tracker().clear_all_data()
    return jsonify({"status": "ok"})


# -------- Statistics --------

@bp.route("/api/days/<day>")
def day_stats(day: str):
    """Logged, remaining and progress for one date."""
    try:
        stats = _tracker().get_day_stats(day)
    except TrackerValidationError as e:
        return _error(str(e), 400)
    return jsonify(_day_stats_dict(stats))


@bp.route("/api/summary")
def summary():
    return jsonify(_summary_dict(_tracker().get_summary()))
