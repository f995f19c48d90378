"""
Snapshot Store Protocol
=======================

Defines the contract every snapshot backend implements. Uses
``typing.Protocol`` (structural subtyping) so the SQLite and Firestore
repositories satisfy it without inheriting from a common base.

Usage in service type hints::

    from infrastructure.database.repositories.base import SnapshotStore


    class SnapshotService:
        def __init__(self, store: SnapshotStore) -> None: ...
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class SnapshotStore(Protocol):
    """Append-only store of greenhouse snapshots."""

    backend_name: str

    def add(self, document: dict[str, Any]) -> str:
        """Persist a snapshot stamped with the store's own clock.

        Returns the generated document id. Raises ``RepositoryError`` on
        failure.
        """
        ...

    def recent(self, limit: int) -> list[dict[str, Any]]:
        """Return up to ``limit`` snapshots, newest first.

        Each item carries ``id`` (str) and ``timestamp`` (ISO-8601 or None)
        next to the stored fields.
        """
        ...


__all__ = ["SnapshotStore"]
