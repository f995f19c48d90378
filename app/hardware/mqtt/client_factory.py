"""
Helpers for constructing MQTT clients that work across paho-mqtt 1.x and 2.x.

The 2.x releases add a callback API version flag; we pin the legacy v3.1.1
callback signature so handlers keep the (client, userdata, msg) shape on
either major version. Credentials and TLS are applied here so the broker
wrapper only deals with connection lifecycle.
"""
from __future__ import annotations

import logging
import ssl
from typing import Any, Dict

import paho.mqtt.client as mqtt

from app.constants import Timeouts

logger = logging.getLogger(__name__)


def _legacy_callback_api_version() -> Any | None:
    """Return paho 2.x's VERSION1 callback flag, or None on paho 1.x."""
    callback_api_version = getattr(mqtt, "CallbackAPIVersion", None)
    if callback_api_version is None:
        return None
    for attr in ("VERSION1", "V1"):
        if hasattr(callback_api_version, attr):
            return getattr(callback_api_version, attr)
    return None


def create_mqtt_client(
    client_id: str = "",
    *,
    username: str | None = None,
    password: str | None = None,
    use_tls: bool = False,
    tls_insecure: bool = False,
    **kwargs: Any,
) -> mqtt.Client:
    """
    Build a paho MQTT client ready to connect.

    Args:
        client_id: Optional client identifier.
        username: Broker username; credentials are skipped when empty.
        password: Broker password.
        use_tls: Wrap the connection in TLS (``mqtts://``).
        tls_insecure: Skip certificate and hostname verification.
        kwargs: Extra keyword arguments forwarded to the client constructor.
    """
    client_kwargs: Dict[str, Any] = {"client_id": client_id or ""}
    client_kwargs["protocol"] = kwargs.pop("protocol", mqtt.MQTTv311)
    client_kwargs.update(kwargs)

    callback_value = _legacy_callback_api_version()
    if callback_value is not None:
        client_kwargs["callback_api_version"] = callback_value

    client = mqtt.Client(**client_kwargs)

    if username:
        client.username_pw_set(username, password)

    if use_tls:
        if tls_insecure:
            client.tls_set(cert_reqs=ssl.CERT_NONE)
            client.tls_insecure_set(True)
            logger.warning("MQTT TLS certificate verification disabled")
        else:
            client.tls_set(cert_reqs=ssl.CERT_REQUIRED)

    client.reconnect_delay_set(
        min_delay=Timeouts.MQTT_RECONNECT_MIN_DELAY,
        max_delay=Timeouts.MQTT_RECONNECT_MAX_DELAY,
    )
    return client
