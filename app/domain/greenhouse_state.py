"""
Greenhouse State
================
The single shared record mirrored to the dashboard and persisted as snapshots.

Sensor fields start as None until the first reading arrives; actuator
statuses start as "0" (off). Field names follow the dashboard's wire format.
"""
from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from app.enums.device import ActuatorDevice, ActuatorStatus, SensorField
from app.utils.time import iso_now


@dataclass
class GreenhouseState:
    """
    Latest sensor readings and actuator statuses.

    MQTT callbacks, HTTP handlers and the snapshot scheduler run on different
    threads, so every mutation and read goes through ``_lock``.
    """
    temperature: Optional[float] = None
    airHumidity: Optional[float] = None
    soilHumidity: Optional[float] = None
    pumpStatus: str = ActuatorStatus.OFF.value
    valveStatus: str = ActuatorStatus.OFF.value
    relay1Status: str = ActuatorStatus.OFF.value
    relay2Status: str = ActuatorStatus.OFF.value
    lastUpdate: Optional[str] = None

    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    def apply_reading(self, sensor: SensorField, value: Optional[float]) -> str:
        """Store a sensor reading and return the new ``lastUpdate`` stamp.

        Non-finite values are stored as None so the record stays JSON-safe.
        """
        if value is not None and not math.isfinite(value):
            value = None
        with self._lock:
            setattr(self, sensor.value, value)
            return self.touch()

    def touch(self) -> str:
        """Stamp ``lastUpdate`` with the current UTC time."""
        with self._lock:
            self.lastUpdate = iso_now()
            return self.lastUpdate

    def set_actuator(self, device: ActuatorDevice, status: ActuatorStatus) -> None:
        with self._lock:
            setattr(self, device.state_field, status.value)

    def actuator_status(self, device: ActuatorDevice) -> str:
        with self._lock:
            return getattr(self, device.state_field)

    def has_sensor_data(self) -> bool:
        """True once any sensor field holds a value."""
        with self._lock:
            return any(getattr(self, sensor.value) is not None for sensor in SensorField)

    def snapshot(self) -> Dict[str, Any]:
        """Return a consistent copy of the record."""
        with self._lock:
            return {
                'temperature': self.temperature,
                'airHumidity': self.airHumidity,
                'soilHumidity': self.soilHumidity,
                'pumpStatus': self.pumpStatus,
                'valveStatus': self.valveStatus,
                'relay1Status': self.relay1Status,
                'relay2Status': self.relay2Status,
                'lastUpdate': self.lastUpdate,
            }
