"""Socket.IO dashboard channel: greeting on connect and service broadcasts."""
from __future__ import annotations

from app.enums.device import SensorField
from conftest import DummyClient, build_wrapper


def _received(socket_client, name):
    return [msg["args"][0] for msg in socket_client.get_received() if msg["name"] == name]


def test_connect_sends_initial_data(app, container):
    from app.extensions import socketio

    container.state.apply_reading(SensorField.AIR_HUMIDITY, 63.0)
    sock = socketio.test_client(app)
    try:
        assert sock.is_connected()
        [initial] = _received(sock, "initialData")
        assert initial["airHumidity"] == 63.0
        assert initial["pumpStatus"] == "0"
    finally:
        sock.disconnect()


def test_control_command_is_broadcast(client, container, socket_client):
    socket_client.get_received()
    container.control_service.mqtt_client = build_wrapper(DummyClient())

    client.post("/api/control/valve", json={"status": "1"})

    assert _received(socket_client, "controlUpdate") == [{"device": "valve", "status": "1"}]


def test_sensor_message_is_broadcast(container, socket_client):
    from app.services.hardware.telemetry_service import TelemetryService

    socket_client.get_received()
    telemetry = TelemetryService(build_wrapper(DummyClient()), container.state, container.emitter_service)

    telemetry.handle_reading("esp32/soil/percent", b"47")

    [update] = _received(socket_client, "sensorUpdate")
    assert update["topic"] == "esp32/soil/percent"
    assert update["value"] == "47"
    assert container.state.soilHumidity == 47.0
