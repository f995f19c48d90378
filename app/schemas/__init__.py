"""
Schemas Module
==============

Pydantic models for Socket.IO payloads and stored snapshots.
"""

from app.schemas.events import (
    ConnectivityStatePayload,
    ControlUpdatePayload,
    DataSavedPayload,
    SensorUpdatePayload,
    SnapshotDocument,
)

__all__ = [
    "ConnectivityStatePayload",
    "ControlUpdatePayload",
    "DataSavedPayload",
    "SensorUpdatePayload",
    "SnapshotDocument",
]
