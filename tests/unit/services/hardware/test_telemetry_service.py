"""
Unit Tests for TelemetryService
===============================
Sensor topics -> shared record -> sensorUpdate broadcast.
"""

from unittest.mock import Mock

import pytest

from app.services.hardware.telemetry_service import TelemetryService
from conftest import DummyMessage


@pytest.fixture
def mock_mqtt_client():
    client = Mock()
    client.subscribe = Mock()
    return client


@pytest.fixture
def telemetry(mock_mqtt_client, state, emitter):
    return TelemetryService(mqtt_client=mock_mqtt_client, state=state, emitter=emitter)


class TestTelemetrySubscriptions:
    def test_subscribes_to_sensor_topics_only(self, telemetry, mock_mqtt_client):
        topics = [call[0][0] for call in mock_mqtt_client.subscribe.call_args_list]

        assert sorted(topics) == sorted(
            ["esp32/air/temperature", "esp32/air/humidity", "esp32/soil/percent"]
        )
        assert not any("control" in topic for topic in topics)

    def test_subscribe_failure_does_not_abort_startup(self, state, emitter):
        client = Mock()
        client.subscribe = Mock(side_effect=[RuntimeError("offline"), None, None])

        TelemetryService(mqtt_client=client, state=state, emitter=emitter)

        assert client.subscribe.call_count == 3


class TestTelemetryMessages:
    def test_reading_updates_record_and_broadcasts_raw_value(self, telemetry, state, fake_sio):
        telemetry._on_message(None, None, DummyMessage("esp32/air/temperature", b"24.5"))

        assert state.temperature == 24.5
        assert state.lastUpdate is not None

        [event] = fake_sio.events("sensorUpdate")
        assert event["payload"] == {
            "topic": "esp32/air/temperature",
            "value": "24.5",
            "timestamp": state.lastUpdate,
        }
        assert event["room"] is None

    def test_each_sensor_topic_maps_to_its_field(self, telemetry, state):
        telemetry._on_message(None, None, DummyMessage("esp32/air/humidity", b"63"))
        telemetry._on_message(None, None, DummyMessage("esp32/soil/percent", b"38.2%"))

        assert state.airHumidity == 63.0
        assert state.soilHumidity == 38.2
        assert state.temperature is None

    def test_non_numeric_payload_clears_field_but_is_still_broadcast(self, telemetry, state, fake_sio):
        state.temperature = 20.0

        telemetry._on_message(None, None, DummyMessage("esp32/air/temperature", b"sensor error"))

        assert state.temperature is None
        assert fake_sio.events("sensorUpdate")[0]["payload"]["value"] == "sensor error"

    def test_unknown_topic_only_stamps_record(self, telemetry, state, fake_sio):
        telemetry._on_message(None, None, DummyMessage("esp32/other/thing", b"5"))

        assert state.has_sensor_data() is False
        assert state.lastUpdate is not None
        assert fake_sio.events("sensorUpdate")[0]["payload"]["topic"] == "esp32/other/thing"

    def test_handler_never_raises(self, telemetry, state, monkeypatch):
        monkeypatch.setattr(state, "apply_reading", Mock(side_effect=RuntimeError("boom")))

        telemetry._on_message(None, None, DummyMessage("esp32/air/temperature", b"1"))

        assert telemetry.get_stats()["messages_failed"] == 1

    def test_messages_flow_through_the_broker_wrapper(self, mqtt_wrapper, state, emitter):
        TelemetryService(mqtt_client=mqtt_wrapper, state=state, emitter=emitter)

        mqtt_wrapper._dispatch_message(None, None, DummyMessage("esp32/soil/percent", b"55"))

        assert state.soilHumidity == 55.0
