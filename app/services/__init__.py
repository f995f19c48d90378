"""
Service Organization
====================
Services are organized by the side of the bridge they serve:

**application/**
  Singleton services managed by ServiceContainer that do not touch the broker.
  Examples: SnapshotService

**hardware/**
  Services that talk to the ESP32 node through the MQTT broker.
  Examples: TelemetryService, ControlService
"""

from .application.snapshot_service import SnapshotService
from .hardware.control_service import ControlService
from .hardware.telemetry_service import TelemetryService

__all__ = [
    "ControlService",
    "SnapshotService",
    "TelemetryService",
]
