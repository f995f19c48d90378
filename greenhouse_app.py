"""Console entry point for the greenhouse bridge.

Builds the app with the broker connection and the periodic snapshot loop
running, then serves HTTP and Socket.IO on GREENHOUSE_HOST:GREENHOUSE_PORT.
"""
from __future__ import annotations

import logging

from app import create_app, socketio


def main() -> int:
    app = create_app(bootstrap_runtime=True)
    container = app.config["CONTAINER"]
    config = container.config

    logging.info("Starting server on %s:%s", config.host, config.port)
    logging.info("Dashboard: http://localhost:%s", config.port)
    logging.info("Snapshots saved every %ss to %s", config.save_interval_seconds, container.store.backend_name)

    try:
        socketio.run(
            app,
            host=config.host,
            port=config.port,
            debug=config.DEBUG,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
