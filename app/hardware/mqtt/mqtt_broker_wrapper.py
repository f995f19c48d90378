"""
    This module provides a wrapper class for handling MQTT client functionality.
    It includes methods for connecting, disconnecting, publishing, and subscribing
    to the greenhouse broker, with appropriate logging for each operation.

    Subscriptions are remembered and replayed on every (re)connect, so a
    dropped TLS session to a cloud broker does not silently stop sensor
    ingestion.
"""

import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Callable

import paho.mqtt.client as mqtt

from app.constants import Timeouts
from app.domain.exceptions import DeviceError
from app.hardware.mqtt.client_factory import create_mqtt_client
from app.schemas.events import ConnectivityStatePayload
from app.utils.time import iso_now, utc_now

# Broker traffic goes to its own rotating file, kept out of the main application log
_mqtt_logger = logging.getLogger("greenhouse.mqtt")

_LOG_MQTT_DISPATCH = os.getenv("GREENHOUSE_LOG_MQTT_DISPATCH", "").lower() in {"1", "true", "t", "yes", "on"}

MessageCallback = Callable[[Any, Any, Any], None]


def configure_mqtt_logging(log_path: str) -> RotatingFileHandler:
    """
    Attach the rotating broker-traffic file handler to ``greenhouse.mqtt``.

    A handler writing elsewhere is closed and replaced; one already writing
    to ``log_path`` is reused, so rebuilding the container does not stack
    handlers.
    """
    target = os.path.abspath(log_path)
    for handler in list(_mqtt_logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            if handler.baseFilename == target:
                return handler
            _mqtt_logger.removeHandler(handler)
            handler.close()

    os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB max per file
        backupCount=3,
        encoding="utf-8",
        delay=True,
    )
    handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
    _mqtt_logger.addHandler(handler)
    _mqtt_logger.setLevel(logging.INFO)
    _mqtt_logger.propagate = False
    return handler


@dataclass
class HealthStatus:
    """
    Tracks the health status of the MQTT client connection.
    """

    is_connected: bool = False
    last_error: str | None = None
    last_error_time: datetime | None = None
    connection_attempts: int = 0
    successful_publishes: int = 0
    failed_publishes: int = 0
    active_subscriptions: int = 0
    last_transition: ConnectivityStatePayload | None = None

    @property
    def success_rate(self) -> float:
        """Calculate publish success rate percentage"""
        total_publishes = self.successful_publishes + self.failed_publishes
        if total_publishes == 0:
            return 0.0
        return (self.successful_publishes / total_publishes) * 100

    def mark_connected(self, endpoint: str):
        """Mark the client as successfully connected."""
        self.is_connected = True
        self.last_error = None
        self.last_error_time = None
        self.last_transition = ConnectivityStatePayload(status="connected", endpoint=endpoint, timestamp=iso_now())

    def mark_disconnected(self, endpoint: str, reason: str | None = None):
        """Mark the client as disconnected."""
        self.is_connected = False
        self.last_transition = ConnectivityStatePayload(
            status="disconnected", endpoint=endpoint, timestamp=iso_now(), reason=reason
        )

    def record_error(self, error: Exception | str):
        """Record a connection or operation error."""
        self.last_error = str(error)
        self.last_error_time = utc_now()

    def increment_connection_attempts(self):
        self.connection_attempts += 1

    def record_publish_success(self):
        self.successful_publishes += 1

    def record_publish_failure(self):
        self.failed_publishes += 1

    def set_active_subscriptions(self, count: int):
        self.active_subscriptions = count

    def to_dict(self):
        """Return health status as a dictionary."""
        return {
            "is_connected": self.is_connected,
            "last_error": self.last_error,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            "connection_attempts": self.connection_attempts,
            "successful_publishes": self.successful_publishes,
            "failed_publishes": self.failed_publishes,
            "active_subscriptions": self.active_subscriptions,
            "publish_success_rate": round(self.success_rate, 2),
            "last_transition": self.last_transition.model_dump() if self.last_transition else None,
        }


class MQTTClientWrapper:
    """
    Wrapper class for handling MQTT client functionality.
    """

    def __init__(
        self,
        broker,
        port,
        client_id="",
        *,
        username=None,
        password=None,
        use_tls=False,
        tls_insecure=False,
        keepalive=Timeouts.MQTT_KEEPALIVE,
    ):
        """
        Initializes the MQTT client wrapper and starts connecting.

        Args:
            broker (str): The MQTT broker address.
            port (int): The MQTT broker port.
            client_id (str, optional): The MQTT client ID. Defaults to "".
            username (str, optional): Broker username.
            password (str, optional): Broker password.
            use_tls (bool): Connect over TLS.
            tls_insecure (bool): Skip broker certificate verification.
            keepalive (int): Keepalive interval in seconds.
        """
        self.broker = broker
        self.port = port
        self.client_id = client_id
        self.keepalive = keepalive
        self.client = create_mqtt_client(
            client_id=client_id,
            username=username,
            password=password,
            use_tls=use_tls,
            tls_insecure=tls_insecure,
        )
        self._callback_lock = threading.Lock()
        self._callbacks: list[tuple[str, MessageCallback]] = []
        self._subscribed_topics: list[str] = []
        # Always dispatch through our fan-out handler so multiple subscribers can coexist
        self.client.on_message = self._dispatch_message
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.health_status = HealthStatus()
        self._started = False
        self._connect()

    @property
    def endpoint(self) -> str:
        return f"{self.broker}:{self.port}"

    @property
    def connected(self) -> bool:
        return self.health_status.is_connected

    def _connect(self):
        """
        Starts an asynchronous connection; the network loop keeps retrying.
        """
        try:
            self.health_status.increment_connection_attempts()
            self.client.connect_async(self.broker, self.port, self.keepalive)
            self.client.loop_start()
            self._started = True
            _mqtt_logger.info("Connecting to MQTT broker %s", self.endpoint)
        except Exception as e:
            _mqtt_logger.error("Error connecting to MQTT broker %s: %s", self.endpoint, e)
            self.health_status.record_error(e)

    def _on_connect(self, client, userdata, flags, rc):
        if rc != 0:
            reason = mqtt.connack_string(rc)
            self.health_status.record_error(reason)
            _mqtt_logger.error("MQTT broker %s refused connection: %s", self.endpoint, reason)
            return

        self.health_status.mark_connected(self.endpoint)
        _mqtt_logger.info("Connected to MQTT broker %s", self.endpoint)

        with self._callback_lock:
            topics = list(self._subscribed_topics)
        for topic in topics:
            self._send_subscribe(topic)

    def _on_disconnect(self, client, userdata, rc):
        reason = None if rc == 0 else mqtt.error_string(rc)
        self.health_status.mark_disconnected(self.endpoint, reason)
        if reason:
            self.health_status.record_error(reason)
            _mqtt_logger.warning("Unexpected disconnect from MQTT broker %s: %s", self.endpoint, reason)
        else:
            _mqtt_logger.info("Disconnected from MQTT broker %s", self.endpoint)

    def disconnect(self):
        """
        Disconnects from the MQTT broker and stops the network loop.
        """
        if not self._started:
            return
        try:
            self.client.disconnect()
            self.client.loop_stop()
            self._started = False
            self.health_status.mark_disconnected(self.endpoint)
            with self._callback_lock:
                self._callbacks.clear()
                self._subscribed_topics.clear()
            self.health_status.set_active_subscriptions(0)
            _mqtt_logger.info("Disconnected from MQTT broker.")
        except Exception as e:
            _mqtt_logger.error("Error disconnecting from MQTT broker: %s", e)
            self.health_status.record_error(e)

    def publish(self, topic, payload):
        """
        Publishes a message to the MQTT broker.

        Args:
            topic (str): The MQTT topic to publish to.
            payload (str): The message payload.

        Raises:
            DeviceError: If the client is offline or paho rejects the message.
        """
        if not self.connected:
            self.health_status.record_publish_failure()
            _mqtt_logger.warning("MQTT client not connected. Cannot publish to %s.", topic)
            raise DeviceError("MQTT client not connected", detail={"topic": topic})

        try:
            msg_info = self.client.publish(topic, payload)
        except Exception as e:
            self.health_status.record_publish_failure()
            self.health_status.record_error(e)
            _mqtt_logger.error("Error publishing to %s: %s", topic, e)
            raise DeviceError(str(e), detail={"topic": topic}) from e

        if msg_info.rc != mqtt.MQTT_ERR_SUCCESS:
            self.health_status.record_publish_failure()
            reason = mqtt.error_string(msg_info.rc)
            self.health_status.record_error(reason)
            _mqtt_logger.error("Failed to publish to %s: %s. MQTT result code: %s", topic, payload, msg_info.rc)
            raise DeviceError(reason, detail={"topic": topic, "rc": msg_info.rc})

        self.health_status.record_publish_success()
        _mqtt_logger.debug("Published to %s: %s", topic, payload)

    def subscribe(self, topic, callback):
        """
        Registers a callback for a topic and subscribes when connected.

        The topic is remembered and re-subscribed on every reconnect.

        Args:
            topic (str): The MQTT topic filter to subscribe to.
            callback (Callable): The callback function to handle messages.
        """
        with self._callback_lock:
            self._callbacks.append((topic, callback))
            is_new_topic = topic not in self._subscribed_topics
            if is_new_topic:
                self._subscribed_topics.append(topic)
            self.health_status.set_active_subscriptions(len(self._subscribed_topics))

        _mqtt_logger.info("Registered callback %s for topic %s", getattr(callback, "__name__", callback), topic)
        if is_new_topic and self.connected:
            self._send_subscribe(topic)

    def _send_subscribe(self, topic: str) -> None:
        try:
            result, _mid = self.client.subscribe(topic)
            if result == mqtt.MQTT_ERR_SUCCESS:
                _mqtt_logger.info("Subscribed to: %s", topic)
            else:
                _mqtt_logger.error("Failed to subscribe to topic %s: result code %s", topic, result)
        except Exception as e:
            self.health_status.record_error(e)
            _mqtt_logger.error("Error subscribing to MQTT topic %s: %s", topic, e)

    def _dispatch_message(self, client, userdata, msg) -> None:
        """
        Fan out MQTT messages to all registered callbacks that match the topic
        using MQTT wildcard semantics.
        """
        if _LOG_MQTT_DISPATCH:
            _mqtt_logger.debug(
                "MQTT DISPATCHER: topic=%s payload_len=%s registered_callbacks=%s",
                msg.topic,
                len(msg.payload),
                len(self._callbacks),
            )

        with self._callback_lock:
            callbacks = list(self._callbacks)

        handled = False
        for sub, callback in callbacks:
            try:
                if mqtt.topic_matches_sub(sub, msg.topic):
                    handled = True
                    callback(client, userdata, msg)
            except Exception as e:
                _mqtt_logger.error("Error in MQTT callback for topic %s: %s", sub, e, exc_info=True)

        if not handled:
            _mqtt_logger.warning(
                "MQTT message on %s had no registered handlers (subscriptions: %s)",
                msg.topic,
                [s[0] for s in callbacks],
            )
