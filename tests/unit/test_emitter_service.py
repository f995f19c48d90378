from app.enums.device import ActuatorDevice
from app.schemas.events import ControlUpdatePayload, DataSavedPayload, SensorUpdatePayload
from app.utils.emitters import EmitterService
from conftest import FakeSocketIO


class ExplodingSocketIO:
    def emit(self, *_args, **_kwargs):
        raise RuntimeError("socket closed")


def test_sensor_update_is_broadcast_verbatim():
    sio = FakeSocketIO()
    emitter = EmitterService(sio=sio)

    emitter.emit_sensor_update(
        SensorUpdatePayload(topic="esp32/air/temperature", value="23.5C", timestamp="2026-01-01T00:00:00+00:00")
    )

    event = sio.emits[0]
    assert event["event"] == "sensorUpdate"
    assert event["room"] is None
    assert event["namespace"] == "/"
    assert event["payload"] == {
        "topic": "esp32/air/temperature",
        "value": "23.5C",
        "timestamp": "2026-01-01T00:00:00+00:00",
    }


def test_control_update_serializes_device_as_plain_string():
    sio = FakeSocketIO()
    emitter = EmitterService(sio=sio)

    emitter.emit_control_update(ControlUpdatePayload(device=ActuatorDevice.RELAY1, status="1"))

    assert sio.emits[0]["event"] == "controlUpdate"
    assert sio.emits[0]["payload"] == {"device": "relay1", "status": "1"}
    assert type(sio.emits[0]["payload"]["device"]) is str


def test_initial_data_targets_one_session():
    sio = FakeSocketIO()
    emitter = EmitterService(sio=sio)

    emitter.emit_initial_data("sid-123", {"temperature": None})

    assert sio.emits == [
        {"event": "initialData", "payload": {"temperature": None}, "room": "sid-123", "namespace": "/"}
    ]


def test_emit_failures_are_swallowed():
    emitter = EmitterService(sio=ExplodingSocketIO())

    delivered = emitter.emit_data_saved(DataSavedPayload(message="Data saved (scheduled)", timestamp="now"))

    assert delivered is False
