from enum import Enum


class WebSocketEvent(str, Enum):
    """Socket.IO event names consumed by the dashboard."""

    # Sent once to a freshly connected session
    INITIAL_DATA = "initialData"

    # Broadcast to every open session
    SENSOR_UPDATE = "sensorUpdate"
    CONTROL_UPDATE = "controlUpdate"
    DATA_SAVED = "dataSaved"


class SaveReason(str, Enum):
    """Why a snapshot was written to the store."""

    SCHEDULED = "scheduled"
    PUMP_CONTROL = "pump_control"
    VALVE_CONTROL = "valve_control"
    RELAY1_CONTROL = "relay1_control"
    RELAY2_CONTROL = "relay2_control"
