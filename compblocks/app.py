"""Application factory for the compensation block engine."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from flask import Flask, jsonify
from flask.typing import ResponseReturnValue

from .blueprints.employees.routes import bp as employees_bp
from .blueprints.monthly_status.routes import bp as monthly_status_bp
from .blueprints.movements.routes import bp as movements_bp
from .blueprints.promotions.routes import bp as promotions_bp
from .config import load_settings
from .dao import db as db_module
from .domain.months import InvalidMonthFormatError
from .logging_utils import configure_logging, get_logger
from .services import propagation, snapshot_service

logger = get_logger(__name__)

DEFAULT_CONFIG: dict[str, Any] = {
    "AUTO_INIT_DB": True,
    "SETTINGS_FILE": None,
}


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_mapping(DEFAULT_CONFIG)

    if test_config:
        app.config.update(test_config)

    database_path = app.config.get(
        "DATABASE",
        Path(app.instance_path) / "compblocks.sqlite",
    )
    if isinstance(database_path, Path):
        database_path = str(database_path)
    app.config["DATABASE"] = database_path

    settings = load_settings(app.config.get("SETTINGS_FILE"))
    app.config["ENGINE_SETTINGS"] = settings
    configure_logging(
        app.config.get("LOG_LEVEL", settings["logging"]["level"]),
        app.config.get("LOG_FILE", settings["logging"]["file"]),
    )

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    db_module.init_app(app)
    if app.config.get("AUTO_INIT_DB", True):
        db_module.ensure_schema(app)

    for blueprint in (movements_bp, promotions_bp, employees_bp, monthly_status_bp):
        app.register_blueprint(blueprint)

    _register_error_handlers(app)
    _register_commands(app)

    @app.get("/healthz")
    def healthcheck() -> tuple[str, int]:
        return "OK", 200

    return app


def _error(message: str, status: int) -> ResponseReturnValue:
    return jsonify({"success": False, "error": message}), status


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(InvalidMonthFormatError)
    def _invalid_month(exc: InvalidMonthFormatError) -> ResponseReturnValue:
        return _error(str(exc), 400)

    @app.errorhandler(snapshot_service.ValidationError)
    def _invalid_value(exc: snapshot_service.ValidationError) -> ResponseReturnValue:
        return _error(str(exc), 400)

    @app.errorhandler(snapshot_service.SnapshotNotFoundError)
    def _not_found(exc: snapshot_service.SnapshotNotFoundError) -> ResponseReturnValue:
        return _error(str(exc), 404)

    @app.errorhandler(snapshot_service.SnapshotLockedError)
    def _locked(exc: snapshot_service.SnapshotLockedError) -> ResponseReturnValue:
        return _error(str(exc), 409)

    @app.errorhandler(db_module.DatabaseError)
    def _storage(exc: db_module.DatabaseError) -> ResponseReturnValue:
        logger.error("Storage failure: %s", exc)
        return _error("storage error", 500)


def _register_commands(app: Flask) -> None:
    @app.cli.command("reclassify")
    @click.option("--month", required=True, help="Month to recompute, YYYY-MM.")
    def reclassify_command(month: str) -> None:
        """Recompute cached block and stage for every snapshot of a month."""
        changed = snapshot_service.reclassify_month(month)
        click.echo(f"{changed} snapshots updated.")

    @app.cli.command("replay-movements")
    @click.argument("employee_code")
    def replay_command(employee_code: str) -> None:
        """Re-apply all recorded movements of one employee in date order."""
        count = propagation.replay(employee_code.strip().upper())
        click.echo(f"{count} movements replayed.")


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
