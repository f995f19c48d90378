"""
Hardware Service Layer
======================
Services bridging the ESP32 greenhouse node over MQTT.

Services:
- TelemetryService: sensor topics -> shared record -> dashboard broadcast
- ControlService: dashboard command -> actuator topic -> record, broadcast, snapshot

Architecture:
    ServiceContainer
      ├─ TelemetryService (only when the broker runtime is started)
      └─ ControlService
"""

from app.services.hardware.control_service import ControlService
from app.services.hardware.telemetry_service import TelemetryService

__all__ = [
    "ControlService",
    "TelemetryService",
]
