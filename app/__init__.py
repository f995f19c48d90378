from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import threading
from pathlib import Path
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from app.blueprints.api.control import control_api
from app.blueprints.api.health import health_api
from app.blueprints.api.sensors import sensors_api
from app.blueprints.ui.routes import ui_bp
from app.config import AppConfig, load_config, setup_logging
from app.extensions import init_extensions, socketio


def _apply_overrides(config: AppConfig, overrides: dict[str, Any]) -> None:
    for key, value in overrides.items():
        attr = key if hasattr(config, key) else key.lower()
        if not hasattr(config, attr):
            raise ValueError(f"Unknown configuration key: {key}")
        setattr(config, attr, value)
    config.validate()


def create_app(config_overrides: dict[str, Any] | None = None, *, bootstrap_runtime: bool = False) -> Flask:
    config = load_config()
    if config_overrides:
        _apply_overrides(config, config_overrides)

    # Configure logging early so broker connect/subscribe lines are visible
    setup_logging(debug=config.DEBUG, level=config.log_level)

    public_dir = Path(config.public_dir)
    if not public_dir.is_absolute():
        public_dir = Path(__file__).resolve().parent.parent / public_dir
    config.public_dir = str(public_dir)

    # Static dashboard assets are served from the site root (/app.js, /style.css)
    flask_app = Flask(__name__, static_folder=str(public_dir), static_url_path="")
    flask_app.config.update(config.as_flask_config())
    flask_app.json.sort_keys = False

    # Handlers must be declared before the first init_app: Flask-SocketIO only
    # replays handlers it collected while no server existed onto each new server
    from app.socketio import register_handlers

    register_handlers()

    # Initialize Socket.IO BEFORE building ServiceContainer (EmitterService needs it)
    init_extensions(flask_app, config.socketio_cors_origins)

    from app.services.container import ServiceContainer

    container = ServiceContainer.build(config, start_runtime=bootstrap_runtime)
    flask_app.config["CONTAINER"] = container

    # ── Graceful shutdown handlers ──────────────────────────────────
    if bootstrap_runtime:
        _register_shutdown_handlers(container)

    # Global JSON error handler: unhandled exceptions on /api/ routes get the
    # standard envelope; domain exceptions carry their own ``http_status``.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        if not request.path.startswith("/api/"):
            if isinstance(exc, HTTPException):
                return exc
            raise exc
        from app.domain.exceptions import GreenhouseError
        from app.utils.http import domain_error, error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, GreenhouseError):
            return domain_error(exc, context=type(exc).__name__)

        return safe_error(exc, 500, context="unhandled")

    flask_app.register_blueprint(ui_bp)
    flask_app.register_blueprint(sensors_api)
    flask_app.register_blueprint(control_api)
    flask_app.register_blueprint(health_api)

    for bp_name in flask_app.blueprints:
        logging.info(" Registered blueprint: %s", bp_name)

    if not bootstrap_runtime:
        logging.info("Skipping MQTT and scheduler bootstrap (bootstrap_runtime=False)")

    logger = logging.getLogger(__name__)
    logger.info("Greenhouse bridge initialized successfully.")

    return flask_app


def _register_shutdown_handlers(container) -> None:
    """Stop the scheduler and broker loop once, on exit or SIGINT/SIGTERM."""
    shutdown_lock = threading.Lock()
    shutdown_done = False

    def _graceful_shutdown(reason: str = "unknown") -> None:
        nonlocal shutdown_done
        with shutdown_lock:
            if shutdown_done:
                return
            shutdown_done = True
        logging.info("Graceful shutdown initiated (%s)", reason)
        try:
            container.shutdown()
        except Exception as exc:
            logging.warning("Error during graceful shutdown: %s", exc)

    def _signal_handler(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logging.info("Received %s, shutting down", sig_name)
        _graceful_shutdown(sig_name)
        raise SystemExit(0)

    atexit.register(_graceful_shutdown, "atexit")

    # Signal handlers can only be installed from the main thread
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(OSError, ValueError):
            signal.signal(sig, _signal_handler)


__all__ = ["create_app", "socketio"]
