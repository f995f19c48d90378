import ssl
from unittest.mock import MagicMock, patch

import paho.mqtt.client as mqtt

from app.hardware.mqtt.client_factory import create_mqtt_client


def test_create_mqtt_client_handles_available_version_flags():
    client = create_mqtt_client("factory-test")

    assert getattr(client, "_client_id", b"").decode() == "factory-test"
    assert getattr(client, "_protocol", None) in (4, getattr(mqtt, "MQTTv311", 4))
    assert hasattr(client, "connect_async")


def test_create_mqtt_client_applies_credentials_and_insecure_tls():
    fake_client = MagicMock()
    with patch("app.hardware.mqtt.client_factory.mqtt.Client", return_value=fake_client):
        client = create_mqtt_client(
            "greenhouse",
            username="node",
            password="secret",
            use_tls=True,
            tls_insecure=True,
        )

    assert client is fake_client
    fake_client.username_pw_set.assert_called_once_with("node", "secret")
    fake_client.tls_set.assert_called_once_with(cert_reqs=ssl.CERT_NONE)
    fake_client.tls_insecure_set.assert_called_once_with(True)
    fake_client.reconnect_delay_set.assert_called_once()


def test_create_mqtt_client_verifies_certificates_by_default_tls():
    fake_client = MagicMock()
    with patch("app.hardware.mqtt.client_factory.mqtt.Client", return_value=fake_client):
        create_mqtt_client(use_tls=True)

    fake_client.tls_set.assert_called_once_with(cert_reqs=ssl.CERT_REQUIRED)
    fake_client.tls_insecure_set.assert_not_called()
    fake_client.username_pw_set.assert_not_called()


def test_create_mqtt_client_plain_connection_skips_tls():
    fake_client = MagicMock()
    with patch("app.hardware.mqtt.client_factory.mqtt.Client", return_value=fake_client):
        create_mqtt_client()

    fake_client.tls_set.assert_not_called()
