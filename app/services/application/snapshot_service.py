"""Snapshot persistence for the greenhouse record.

Writes the current record to the configured snapshot store, either on the
periodic schedule or right after an actuator command, and serves the stored
history back to the dashboard.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from app.domain.exceptions import GreenhouseError
from app.domain.greenhouse_state import GreenhouseState
from app.enums.events import SaveReason
from app.schemas.events import DataSavedPayload, SnapshotDocument
from app.utils.emitters import EmitterService
from app.utils.time import iso_now
from infrastructure.database.repositories.base import SnapshotStore

logger = logging.getLogger(__name__)


class SnapshotService:
    """Persist and read back greenhouse snapshots."""

    def __init__(self, state: GreenhouseState, store: SnapshotStore, emitter: EmitterService):
        self.state = state
        self.store = store
        self.emitter = emitter

    def build_document(self) -> SnapshotDocument:
        """Current record as a storable document; missing readings become 0."""
        current = self.state.snapshot()
        return SnapshotDocument(
            temperature=current["temperature"] or 0,
            airHumidity=current["airHumidity"] or 0,
            soilHumidity=current["soilHumidity"] or 0,
            pumpStatus=current["pumpStatus"],
            valveStatus=current["valveStatus"],
            relay1Status=current["relay1Status"],
            relay2Status=current["relay2Status"],
        )

    def save_snapshot(self, reason: SaveReason | str = SaveReason.SCHEDULED, *, raise_errors: bool = False) -> Optional[str]:
        """
        Write the record to the store if any sensor has reported.

        Store failures are logged. They are swallowed unless ``raise_errors``
        is set, in which case the exception propagates to the caller.

        Returns:
            The new document id, or None when nothing was written.
        """
        if not self.state.has_sensor_data():
            logger.debug("No sensor data yet, skipping snapshot (%s)", reason)
            return None

        reason_text = reason.value if isinstance(reason, SaveReason) else str(reason)
        document = self.build_document()
        try:
            snapshot_id = self.store.add(document.model_dump())
        except GreenhouseError as exc:
            logger.error("Error saving snapshot (%s): %s", reason_text, exc)
            if raise_errors:
                raise
            return None
        except Exception as exc:
            logger.exception("Unexpected error saving snapshot (%s): %s", reason_text, exc)
            if raise_errors:
                raise
            return None

        message = f"Data saved ({reason_text})"
        logger.info("%s to %s: %s", message, self.store.backend_name, document.model_dump())
        self.emitter.emit_data_saved(DataSavedPayload(message=message, timestamp=iso_now()))
        return snapshot_id

    def save_scheduled(self) -> Optional[str]:
        """Periodic save; store failures propagate so the scheduler counts them."""
        return self.save_snapshot(SaveReason.SCHEDULED, raise_errors=True)

    def history(self, limit: int) -> list[dict[str, Any]]:
        """Newest ``limit`` snapshots, newest first."""
        return self.store.recent(limit)
