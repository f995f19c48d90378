from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.config import AppConfig
from app.domain.greenhouse_state import GreenhouseState
from app.hardware.mqtt.mqtt_broker_wrapper import MQTTClientWrapper
from app.services.application.snapshot_service import SnapshotService
from app.services.container_builder import ContainerBuilder
from app.services.hardware.control_service import ControlService
from app.services.hardware.telemetry_service import TelemetryService
from app.utils.emitters import EmitterService
from app.workers.snapshot_scheduler import SnapshotScheduler
from infrastructure.database.repositories.base import SnapshotStore
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: Optional[SQLiteDatabaseHandler]
    store: SnapshotStore
    audit_logger: AuditLogger
    mqtt_client: Optional[MQTTClientWrapper]
    state: GreenhouseState
    emitter_service: EmitterService
    snapshot_service: SnapshotService
    control_service: ControlService
    telemetry_service: Optional[TelemetryService]
    scheduler: SnapshotScheduler

    @classmethod
    def build(cls, config: AppConfig, *, start_runtime: bool = False) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
            start_runtime: Connect to the broker and start the periodic save loop
        """
        logger.info("Building ServiceContainer using ContainerBuilder...")
        builder = ContainerBuilder(config)
        container = cls(**builder.build(start_runtime=start_runtime))

        if start_runtime:
            container.scheduler.start()

        logger.info("ServiceContainer built successfully.")
        return container

    @property
    def mqtt_connected(self) -> bool:
        return self.mqtt_client is not None and self.mqtt_client.connected

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        try:
            self.scheduler.shutdown()
        except Exception as e:
            logger.warning("Failed to stop SnapshotScheduler: %s", e)

        if self.mqtt_client is not None:
            self.mqtt_client.disconnect()

        if self.database is not None:
            self.database.close_all()
        logger.info("ServiceContainer shutdown complete.")
