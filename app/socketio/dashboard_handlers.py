"""app.socketio.dashboard_handlers

Socket.IO lifecycle handlers for the dashboard on the default namespace.

Sensor, control and save broadcasts are emitted by the services through
EmitterService; these handlers only greet new sessions with the current
record and log session lifecycle.
"""

import logging

from flask import current_app, request

from app.extensions import socketio
from app.utils.emitters import SOCKETIO_NAMESPACE_DEFAULT

logger = logging.getLogger(__name__)


@socketio.on("connect", namespace=SOCKETIO_NAMESPACE_DEFAULT)
def handle_connect(auth=None):
    """Send the full greenhouse record to the new session only."""
    logger.info("Client connected: %s", request.sid)
    container = current_app.config["CONTAINER"]
    container.emitter_service.emit_initial_data(request.sid, container.state.snapshot())


@socketio.on("disconnect", namespace=SOCKETIO_NAMESPACE_DEFAULT)
def handle_disconnect(reason=None):
    logger.info("Client disconnected: %s", request.sid)
