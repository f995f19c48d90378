from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from infrastructure.database.ops.snapshots import SnapshotOperations


@dataclass(frozen=True)
class SnapshotRepository:
    """SQLite-backed snapshot store (the default backend)."""

    _backend: SnapshotOperations
    backend_name: str = "sqlite"

    def add(self, document: dict[str, Any]) -> str:
        return str(self._backend.insert_snapshot(document))

    def recent(self, limit: int) -> list[dict[str, Any]]:
        return self._backend.get_recent_snapshots(limit=limit)

    def count(self) -> int:
        return self._backend.count_snapshots()
