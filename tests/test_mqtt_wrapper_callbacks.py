import logging
from logging.handlers import RotatingFileHandler

import pytest

from app.domain.exceptions import DeviceError
from app.hardware.mqtt.mqtt_broker_wrapper import configure_mqtt_logging
from conftest import DummyClient, DummyMessage, build_wrapper


def test_wrapper_connects_asynchronously_on_creation():
    dummy_client = DummyClient()
    wrapper = build_wrapper(dummy_client, connected=False)

    assert dummy_client.connect_calls == [("broker.test", 8883, 60)]
    assert dummy_client.loop_started is True
    assert wrapper.connected is False
    assert wrapper.health_status.connection_attempts == 1


def test_wrapper_fans_out_callbacks_without_overwrite():
    dummy_client = DummyClient()
    wrapper = build_wrapper(dummy_client)
    events = []

    def air_cb(_client, _userdata, msg):
        events.append(("air", msg.topic, msg.payload))

    def all_cb(_client, _userdata, msg):
        events.append(("all", msg.topic))

    wrapper.subscribe("esp32/air/+", air_cb)
    wrapper.subscribe("esp32/#", all_cb)

    wrapper._dispatch_message(wrapper.client, None, DummyMessage("esp32/air/temperature", b"24.5"))
    wrapper._dispatch_message(wrapper.client, None, DummyMessage("esp32/soil/percent", b"40"))

    assert ("air", "esp32/air/temperature", b"24.5") in events
    assert ("all", "esp32/air/temperature") in events
    assert ("all", "esp32/soil/percent") in events
    assert not any(e[0] == "air" and e[1] == "esp32/soil/percent" for e in events)
    assert wrapper.client.on_message == wrapper._dispatch_message


def test_callback_errors_do_not_stop_other_callbacks():
    wrapper = build_wrapper(DummyClient())
    hits = []

    def broken_cb(_client, _userdata, _msg):
        raise RuntimeError("boom")

    wrapper.subscribe("esp32/air/humidity", broken_cb)
    wrapper.subscribe("esp32/air/humidity", lambda _c, _u, msg: hits.append(msg.payload))

    wrapper._dispatch_message(wrapper.client, None, DummyMessage("esp32/air/humidity", b"61"))

    assert hits == [b"61"]


def test_subscriptions_are_replayed_after_reconnect():
    dummy_client = DummyClient()
    wrapper = build_wrapper(dummy_client, connected=False)

    wrapper.subscribe("esp32/air/temperature", lambda *_: None)
    wrapper.subscribe("esp32/air/temperature", lambda *_: None)
    assert dummy_client.subscriptions == []

    wrapper._on_connect(dummy_client, None, {}, 0)
    assert dummy_client.subscriptions == ["esp32/air/temperature"]

    wrapper._on_disconnect(dummy_client, None, 7)
    assert wrapper.connected is False
    assert wrapper.health_status.last_transition.status == "disconnected"

    wrapper._on_connect(dummy_client, None, {}, 0)
    assert dummy_client.subscriptions == ["esp32/air/temperature", "esp32/air/temperature"]
    assert wrapper.health_status.active_subscriptions == 1


def test_refused_connection_is_recorded():
    dummy_client = DummyClient()
    wrapper = build_wrapper(dummy_client, connected=False)

    wrapper._on_connect(dummy_client, None, {}, 5)

    assert wrapper.connected is False
    assert wrapper.health_status.last_error


def test_publish_sends_payload_when_connected():
    dummy_client = DummyClient()
    wrapper = build_wrapper(dummy_client)

    wrapper.publish("esp32/control/pump", "1")

    assert dummy_client.published == [("esp32/control/pump", "1")]
    assert wrapper.health_status.successful_publishes == 1


def test_publish_while_disconnected_raises_device_error():
    dummy_client = DummyClient()
    wrapper = build_wrapper(dummy_client, connected=False)

    with pytest.raises(DeviceError, match="not connected"):
        wrapper.publish("esp32/control/pump", "1")

    assert dummy_client.published == []
    assert wrapper.health_status.failed_publishes == 1


def test_publish_rejected_by_paho_raises_device_error():
    dummy_client = DummyClient(publish_rc=4)  # MQTT_ERR_NO_CONN
    wrapper = build_wrapper(dummy_client)

    with pytest.raises(DeviceError) as excinfo:
        wrapper.publish("esp32/control/solenoid", "0")

    assert excinfo.value.detail["rc"] == 4
    assert wrapper.health_status.failed_publishes == 1


def test_disconnect_clears_callbacks():
    dummy_client = DummyClient()
    wrapper = build_wrapper(dummy_client)
    wrapper.subscribe("esp32/soil/percent", lambda *_: None)

    wrapper.disconnect()

    assert wrapper.connected is False
    assert wrapper.health_status.active_subscriptions == 0
    assert dummy_client.loop_started is False


def test_mqtt_log_handler_follows_configured_path(tmp_path):
    mqtt_logger = logging.getLogger("greenhouse.mqtt")
    try:
        first = configure_mqtt_logging(str(tmp_path / "first.log"))
        assert configure_mqtt_logging(str(tmp_path / "first.log")) is first

        second = configure_mqtt_logging(str(tmp_path / "broker" / "mqtt.log"))
        mqtt_logger.info("Connected to MQTT broker broker.test:8883")
        second.flush()

        file_handlers = [h for h in mqtt_logger.handlers if isinstance(h, RotatingFileHandler)]
        assert file_handlers == [second]
        assert "Connected to MQTT broker" in (tmp_path / "broker" / "mqtt.log").read_text(encoding="utf-8")
        assert not (tmp_path / "first.log").exists()
    finally:
        for handler in list(mqtt_logger.handlers):
            if isinstance(handler, RotatingFileHandler):
                mqtt_logger.removeHandler(handler)
                handler.close()
