"""
WebSocket Emitters
=====================================

Purpose:
    Centralized WebSocket emitter service leveraging the Socket.IO server.

Features:
- Broadcast greenhouse events to every open dashboard session.
- Direct emission to a single session (initial state on connect).
- Payload validation through the Pydantic schemas in app.schemas.events.

Usage:
    Instantiate EmitterService with the Flask-SocketIO instance, then call
    emit_sensor_update(), emit_control_update() or emit_data_saved().
    Emission failures are logged and never propagate to the caller: a
    broken socket must not fail an MQTT callback or an HTTP request.
"""

import logging
from typing import Any

from flask_socketio import SocketIO

from app.enums.events import WebSocketEvent
from app.schemas.events import (
    ControlUpdatePayload,
    DataSavedPayload,
    SensorUpdatePayload,
)

logger = logging.getLogger("emitters")

# The dashboard listens on the default namespace
SOCKETIO_NAMESPACE_DEFAULT = "/"


class EmitterService:
    """
    Centralized WebSocket Emitter Service.

    Attributes:
        sio: The Socket.IO SocketIO instance for emitting events.
    """

    def __init__(self, sio: SocketIO):
        self.sio = sio

    def emit(
        self,
        event: str,
        payload: dict[str, Any],
        room: str | None = None,
        namespace: str = SOCKETIO_NAMESPACE_DEFAULT,
    ) -> bool:
        """
        Emit a Socket.IO event.

        Args:
            event (str): Event name (e.g., "sensorUpdate").
            payload (dict): JSON serializable data to send.
            room (Optional[str]): Session id or room. Broadcasts if None.
            namespace (str): Socket.IO namespace to emit under (default "/").

        Returns:
            bool: True when the event was handed to the Socket.IO server.
        """
        try:
            logger.debug("Emitting event='%s' to namespace='%s' room='%s'", event, namespace, room or "broadcast")
            self.sio.emit(event, payload, room=room, namespace=namespace)
            return True
        except Exception as e:
            logger.exception("[Emitter] Failed to emit event '%s' to room '%s': %s", event, room, e)
            return False

    def emit_initial_data(self, sid: str, state: dict[str, Any]) -> bool:
        """Send the full greenhouse record to one freshly connected session."""
        return self.emit(WebSocketEvent.INITIAL_DATA.value, state, room=sid)

    def emit_sensor_update(self, update: SensorUpdatePayload) -> bool:
        return self.emit(WebSocketEvent.SENSOR_UPDATE.value, update.model_dump())

    def emit_control_update(self, update: ControlUpdatePayload) -> bool:
        return self.emit(WebSocketEvent.CONTROL_UPDATE.value, update.model_dump(mode="json"))

    def emit_data_saved(self, notice: DataSavedPayload) -> bool:
        return self.emit(WebSocketEvent.DATA_SAVED.value, notice.model_dump())
