from typing import Literal

from pydantic import BaseModel

from app.enums.device import ActuatorDevice

StatusValue = Literal["0", "1"]
ConnectionStatus = Literal["connected", "disconnected", "error"]


class SensorUpdatePayload(BaseModel):
    """Payload for ``sensorUpdate`` events.

    ``value`` is the decoded broker payload, forwarded verbatim so the
    dashboard sees exactly what the node sent.
    """

    topic: str
    value: str
    timestamp: str


class ControlUpdatePayload(BaseModel):
    """Payload for ``controlUpdate`` events."""

    device: ActuatorDevice
    status: StatusValue


class DataSavedPayload(BaseModel):
    """Payload for ``dataSaved`` events."""

    message: str
    timestamp: str


class ConnectivityStatePayload(BaseModel):
    """Broker connection transitions, kept on the MQTT health record."""

    status: ConnectionStatus
    endpoint: str
    timestamp: str
    reason: str | None = None


class SnapshotDocument(BaseModel):
    """Document written to the snapshot store.

    Sensor fields are never null in a stored document; missing readings are
    written as 0.
    """

    temperature: float = 0
    airHumidity: float = 0
    soilHumidity: float = 0
    pumpStatus: StatusValue = "0"
    valveStatus: StatusValue = "0"
    relay1Status: StatusValue = "0"
    relay2Status: StatusValue = "0"

