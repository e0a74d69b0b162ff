"""Flask application factory for Sprint Tracker web interface."""

from flask import Flask

from sprint_tracker.config import Config, load_config
from sprint_tracker.exceptions import InvalidConfigError
from sprint_tracker.logging import get_logger, setup_logging
from sprint_tracker.store import JsonFileKeyValueStore, Store
from sprint_tracker.tracker import Tracker

logger = get_logger(__name__)


def build_tracker(config: Config) -> Tracker:
    """Create a Tracker persisting to the configured data file."""
    store = Store(JsonFileKeyValueStore(config.data_file))
    return Tracker(
        store,
        work_day_hours=config.work_day_hours,
        sprint_days=config.sprint_days,
    )


def create_app(tracker: Tracker | None = None, config: Config | None = None) -> Flask:
    """Create and configure the Flask application.

    Raises:
        InvalidConfigError: If the config file is invalid
    """
    if config is None:
        try:
            config = load_config()
        except ValueError as e:
            raise InvalidConfigError(str(e)) from e
        setup_logging(config.log_level, config.log_format)

    if tracker is None:
        tracker = build_tracker(config)

    updated = tracker.recalculate_all_sprint_end_dates()
    logger.info("sprint_end_dates_checked", updated=updated)

    app = Flask(__name__)

    app.config["SECRET_KEY"] = "sprint-tracker-local-dev"
    app.extensions["sprint_tracker"] = tracker
    app.extensions["sprint_tracker_config"] = config

    from sprint_tracker.web.routes import bp
    app.register_blueprint(bp)

    return app


def main() -> None:
    """Run the development server."""
    app = create_app()
    app.run(host="127.0.0.1", port=5000)
