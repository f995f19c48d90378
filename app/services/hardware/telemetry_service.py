"""
Telemetry Service
=================

Bridges ESP32 sensor topics into the shared greenhouse record.

Each inbound message:
1. is decoded as UTF-8 text and logged,
2. updates the matching sensor field (``parseFloat`` semantics) and stamps
   ``lastUpdate``; topics outside the sensor map only stamp ``lastUpdate``,
3. is broadcast verbatim to every dashboard session as ``sensorUpdate``.
"""

from __future__ import annotations

import logging
from typing import Any

from app.constants import SENSOR_TOPICS, subscription_topics
from app.domain.greenhouse_state import GreenhouseState
from app.hardware.mqtt.mqtt_broker_wrapper import MQTTClientWrapper
from app.schemas.events import SensorUpdatePayload
from app.utils.emitters import EmitterService
from app.utils.validation import parse_float

logger = logging.getLogger(__name__)


class TelemetryService:
    """Subscribes to the sensor topics and mirrors readings to the dashboard."""

    def __init__(
        self,
        mqtt_client: MQTTClientWrapper,
        state: GreenhouseState,
        emitter: EmitterService,
    ):
        self.mqtt_client = mqtt_client
        self.state = state
        self.emitter = emitter
        self.messages_received = 0
        self.messages_failed = 0

        self._subscribe_to_topics()
        logger.info("TelemetryService initialized and listening")

    def _subscribe_to_topics(self) -> None:
        for topic in subscription_topics():
            try:
                self.mqtt_client.subscribe(topic, self._on_message)
            except Exception as exc:
                logger.error("Failed to subscribe to %s: %s", topic, exc)

    def _on_message(self, client: Any, userdata: Any, msg: Any) -> None:
        """
        Handle one broker message.

        Guaranteed not to raise so a malformed payload cannot kill the MQTT loop.
        """
        topic = str(getattr(msg, "topic", ""))
        try:
            self.handle_reading(topic, getattr(msg, "payload", b""))
        except Exception as exc:
            self.messages_failed += 1
            logger.exception("Failed to handle MQTT message on %s: %s", topic, exc)

    def handle_reading(self, topic: str, payload: bytes | str) -> SensorUpdatePayload:
        """Apply a raw payload to the record and broadcast it."""
        value = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else str(payload)
        logger.info("Received: %s = %s", topic, value)
        self.messages_received += 1

        sensor = SENSOR_TOPICS.get(topic)
        if sensor is not None:
            reading = parse_float(value)
            if reading is None:
                logger.warning("Non-numeric payload on %s: %r", topic, value)
            stamp = self.state.apply_reading(sensor, reading)
        else:
            stamp = self.state.touch()

        update = SensorUpdatePayload(topic=topic, value=value, timestamp=stamp)
        self.emitter.emit_sensor_update(update)
        return update

    def get_stats(self) -> dict[str, int]:
        return {
            "messages_received": self.messages_received,
            "messages_failed": self.messages_failed,
        }
