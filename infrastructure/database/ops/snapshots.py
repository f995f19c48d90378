from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List

from app.domain.exceptions import RepositoryError
from app.utils.time import sqlite_timestamp, to_iso, utc_now

logger = logging.getLogger(__name__)

SNAPSHOT_COLUMNS = (
    "temperature",
    "airHumidity",
    "soilHumidity",
    "pumpStatus",
    "valveStatus",
    "relay1Status",
    "relay2Status",
)


class SnapshotOperations:
    """Database operations for the SensorSnapshots table."""

    def insert_snapshot(self, document: Dict[str, Any]) -> int:
        try:
            db = self.get_db()
            cur = db.cursor()
            cur.execute(
                f"""
                INSERT INTO SensorSnapshots ({", ".join(SNAPSHOT_COLUMNS)}, timestamp)
                VALUES ({", ".join("?" for _ in SNAPSHOT_COLUMNS)}, ?)
                """,
                (*(document.get(column) for column in SNAPSHOT_COLUMNS), sqlite_timestamp(utc_now())),
            )
            db.commit()
            return int(cur.lastrowid)
        except sqlite3.Error as exc:
            logger.error("insert_snapshot failed: %s", exc)
            raise RepositoryError("Failed to store snapshot") from exc

    def get_recent_snapshots(self, limit: int = 50) -> List[Dict[str, Any]]:
        try:
            db = self.get_db()
            cur = db.execute(
                "SELECT * FROM SensorSnapshots ORDER BY timestamp DESC, snapshot_id DESC LIMIT ?",
                (limit,),
            )
            results = []
            for r in cur.fetchall():
                row = dict(r)
                row["id"] = str(row.pop("snapshot_id"))
                row["timestamp"] = to_iso(row.get("timestamp"))
                results.append(row)
            return results
        except sqlite3.Error as exc:
            logger.error("get_recent_snapshots failed: %s", exc)
            raise RepositoryError("Failed to load snapshot history") from exc

    def count_snapshots(self) -> int:
        try:
            row = self.get_db().execute("SELECT COUNT(*) FROM SensorSnapshots").fetchone()
            return int(row[0])
        except sqlite3.Error as exc:
            raise RepositoryError("Failed to count snapshots") from exc
