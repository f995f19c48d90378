"""
Enums Module
============

Enumeration types for the greenhouse bridge.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.device import ActuatorDevice, ActuatorStatus, SensorField
from app.enums.events import SaveReason, WebSocketEvent

__all__ = [
    "ActuatorDevice",
    "ActuatorStatus",
    "SaveReason",
    "SensorField",
    "WebSocketEvent",
]
