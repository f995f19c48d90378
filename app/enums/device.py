"""
Device-related Enumerations
============================

Sensor fields and actuator devices known to the greenhouse bridge.
"""

from enum import Enum


class SensorField(str, Enum):
    """Numeric sensor fields on the shared greenhouse record."""

    TEMPERATURE = "temperature"
    AIR_HUMIDITY = "airHumidity"
    SOIL_HUMIDITY = "soilHumidity"


class ActuatorDevice(str, Enum):
    """Actuators that accept ON/OFF commands."""

    PUMP = "pump"
    VALVE = "valve"
    RELAY1 = "relay1"
    RELAY2 = "relay2"

    @property
    def label(self) -> str:
        return {
            ActuatorDevice.PUMP: "Pump",
            ActuatorDevice.VALVE: "Valve",
            ActuatorDevice.RELAY1: "Relay 1",
            ActuatorDevice.RELAY2: "Relay 2",
        }[self]

    @property
    def state_field(self) -> str:
        """Name of the status field on the shared record."""
        return f"{self.value}Status"


class ActuatorStatus(str, Enum):
    """Binary command payload; published to the broker unchanged."""

    OFF = "0"
    ON = "1"

    @property
    def label(self) -> str:
        return "ON" if self is ActuatorStatus.ON else "OFF"
