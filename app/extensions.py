"""Flask Extension Instances and Initialisation."""

import logging
import os

from flask import Flask
from flask_compress import Compress
from flask_cors import CORS
from flask_socketio import SocketIO

# Flask-Compress instance; compresses JSON/HTML responses with gzip/brotli
compress = Compress()

# Flask-CORS instance; the dashboard may be served from another origin
cors = CORS()


def _socketio_transports() -> list[str]:
    """Return allowed Engine.IO transports.

    Override with `GREENHOUSE_SOCKETIO_TRANSPORTS`, e.g. `polling`.
    """
    raw = os.getenv("GREENHOUSE_SOCKETIO_TRANSPORTS")
    if raw:
        transports = [t.strip() for t in raw.split(",") if t.strip()]
        if transports:
            return transports

    return ["polling", "websocket"]


# Threading mode: MQTT callbacks and the snapshot loop run on plain threads
socketio = SocketIO(
    async_mode="threading",
    cors_allowed_origins=[],
    logger=False,
    engineio_logger=False,
    ping_timeout=60,
    ping_interval=25,
    transports=_socketio_transports(),
)


def _split_origins(cors_origins: str) -> str | list[str]:
    if not isinstance(cors_origins, str) or cors_origins.strip() in {"", "*"}:
        return "*"
    return [origin.strip() for origin in cors_origins.split(",") if origin.strip()]


def init_extensions(app: Flask, cors_origins: str) -> None:
    """Initialise Flask extension objects."""
    origins = _split_origins(cors_origins)

    app.config.setdefault(
        "COMPRESS_MIMETYPES",
        [
            "text/html",
            "text/css",
            "text/plain",
            "application/json",
            "application/javascript",
        ],
    )
    app.config.setdefault("COMPRESS_MIN_SIZE", 256)  # Don't compress tiny responses
    compress.init_app(app)

    cors.init_app(app, resources={r"/api/*": {"origins": origins}}, methods=["GET", "POST"])

    try:
        logging.getLogger("engineio").setLevel(logging.WARNING)

        socketio.init_app(
            app, cors_allowed_origins=origins, logger=logging.getLogger("socketio"), engineio_logger=False
        )
        logging.info("Socket.IO initialized with CORS origins: %s", origins)
    except Exception as e:
        logging.error("Failed to initialize Socket.IO: %s", e, exc_info=True)
        raise
