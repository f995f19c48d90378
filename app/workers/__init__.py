"""
Workers module for background services.

This module contains:
- snapshot_scheduler: fixed-rate loop that persists the greenhouse record
"""

__all__ = [
    "JobResult",
    "SnapshotScheduler",
]

from app.workers.snapshot_scheduler import JobResult, SnapshotScheduler
