import logging
import shutil
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from infrastructure.database.ops.snapshots import SnapshotOperations

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class SQLiteDatabaseHandler(SnapshotOperations):
    """Thread-safe SQLite handler decoupled from Flask globals."""

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path
        self._local = threading.local()
        # An in-memory database exists per connection, so all threads share one
        self._shared_connection: Optional[sqlite3.Connection] = None
        self._shared_lock = threading.Lock()
        # Every per-thread connection, so shutdown can close the ones other threads opened
        self._connections: list[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

        if database_path != MEMORY_DATABASE:
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info("Created database directory: %s", db_path.parent)

    # --- Lifecycle ------------------------------------------------------------
    def get_db(self) -> sqlite3.Connection:
        if self._database_path == MEMORY_DATABASE:
            return self._get_shared_db()

        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None and not self._is_registered(connection):
            # Already closed by close_all()
            connection = None
        if connection is None:
            try:
                connection = self._open_connection()
            except sqlite3.DatabaseError as exc:
                if self._is_corruption_error(exc):
                    logger.error("Database appears corrupt (%s). Recreating a fresh database.", exc)
                    self._quarantine_corrupt_db()
                    connection = self._open_connection()
                else:
                    raise
            self._local.connection = connection
            with self._connections_lock:
                self._connections.append(connection)
            # Each thread gets its own connection; make sure the schema exists
            self._create_schema(connection)
        return connection

    def _is_registered(self, connection: sqlite3.Connection) -> bool:
        with self._connections_lock:
            return any(c is connection for c in self._connections)

    def _get_shared_db(self) -> sqlite3.Connection:
        with self._shared_lock:
            if self._shared_connection is None:
                self._shared_connection = self._open_connection()
                self._create_schema(self._shared_connection)
            return self._shared_connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _is_corruption_error(self, exc: sqlite3.Error) -> bool:
        message = str(exc).lower()
        return (
            "database disk image is malformed" in message
            or "file is not a database" in message
            or "file is encrypted or is not a database" in message
        )

    def _quarantine_corrupt_db(self) -> Optional[Path]:
        db_path = Path(self._database_path)
        if not db_path.exists():
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        quarantine_dir = db_path.parent / "corrupt"
        quarantine_dir.mkdir(parents=True, exist_ok=True)

        suffix = db_path.suffix or ".db"
        quarantined = quarantine_dir / f"{db_path.stem}_corrupt_{timestamp}{suffix}"
        try:
            shutil.move(str(db_path), str(quarantined))
            for sidecar_suffix in ("-wal", "-shm"):
                sidecar = Path(f"{db_path}{sidecar_suffix}")
                if sidecar.exists():
                    shutil.move(str(sidecar), str(quarantine_dir / f"{sidecar.name}_{timestamp}"))
            logger.warning("Quarantined corrupt database to %s", quarantined)
            return quarantined
        except OSError as exc:
            logger.error("Failed to quarantine corrupt database %s: %s", db_path, exc)
            return None

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """WAL lets the scheduler thread write while request threads read."""
        if self._database_path != MEMORY_DATABASE:
            connection.execute("PRAGMA journal_mode=WAL")
            connection.execute("PRAGMA synchronous=NORMAL")
        connection.execute("PRAGMA temp_store=MEMORY")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        if self._database_path == MEMORY_DATABASE:
            with self._shared_lock:
                if self._shared_connection is not None:
                    self._shared_connection.close()
                    self._shared_connection = None
            return

        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            with self._connections_lock:
                self._connections = [c for c in self._connections if c is not connection]
            connection.close()
            delattr(self._local, "connection")

    def close_all(self) -> None:
        """Close every connection opened by any thread, plus the shared in-memory one."""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for connection in connections:
            try:
                connection.close()
            except sqlite3.Error as exc:
                logger.warning("Failed to close SQLite connection: %s", exc)
        with self._shared_lock:
            if self._shared_connection is not None:
                self._shared_connection.close()
                self._shared_connection = None
        if connections:
            logger.info("Closed %d SQLite connection(s)", len(connections))

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the snapshot table if it does not already exist."""
        self.get_db()

    def _create_schema(self, db: sqlite3.Connection) -> None:
        db.execute(
            """
            CREATE TABLE IF NOT EXISTS SensorSnapshots (
                snapshot_id INTEGER PRIMARY KEY AUTOINCREMENT,
                temperature REAL NOT NULL DEFAULT 0,
                airHumidity REAL NOT NULL DEFAULT 0,
                soilHumidity REAL NOT NULL DEFAULT 0,
                pumpStatus TEXT NOT NULL DEFAULT '0',
                valveStatus TEXT NOT NULL DEFAULT '0',
                relay1Status TEXT NOT NULL DEFAULT '0',
                relay2Status TEXT NOT NULL DEFAULT '0',
                timestamp TEXT NOT NULL
            )
            """
        )
        db.execute("CREATE INDEX IF NOT EXISTS idx_sensor_snapshots_timestamp ON SensorSnapshots(timestamp DESC)")
        db.commit()
