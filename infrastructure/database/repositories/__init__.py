"""Snapshot store backends.

Both backends satisfy the structural protocol used for dependency injection::

    from infrastructure.database.repositories.base import SnapshotStore
"""

from infrastructure.database.repositories.base import SnapshotStore
from infrastructure.database.repositories.snapshots import SnapshotRepository

__all__ = [
    "SnapshotRepository",
    "SnapshotStore",
]
