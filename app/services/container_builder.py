"""
Container Builder
=================

Constructs the service container one subsystem at a time:

1. Infrastructure: snapshot store (SQLite or Firestore) and audit log.
2. MQTT: the broker wrapper, only when the runtime is bootstrapped.
3. Services: shared record, emitter, snapshot/control/telemetry services
   and the periodic snapshot scheduler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.config import AppConfig
from app.domain.greenhouse_state import GreenhouseState
from app.hardware.mqtt.mqtt_broker_wrapper import MQTTClientWrapper, configure_mqtt_logging
from app.services.application.snapshot_service import SnapshotService
from app.services.hardware.control_service import ControlService
from app.services.hardware.telemetry_service import TelemetryService
from app.utils.emitters import EmitterService
from app.workers.snapshot_scheduler import SnapshotScheduler
from infrastructure.database.repositories.base import SnapshotStore
from infrastructure.database.repositories.snapshots import SnapshotRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class InfrastructureComponents:
    """Infrastructure layer components (store, logging)."""

    database: SQLiteDatabaseHandler | None
    store: SnapshotStore
    audit_logger: AuditLogger


@dataclass
class MQTTComponents:
    """Broker connection; None when MQTT is disabled or not bootstrapped."""

    mqtt_client: MQTTClientWrapper | None


class ContainerBuilder:
    """
    Builder for constructing the service container.

    Each method constructs one subsystem so the pieces can be built and
    tested on their own.
    """

    def __init__(self, config: AppConfig):
        """Initialize builder with configuration."""
        self.config = config

    def build_infrastructure(self) -> InfrastructureComponents:
        """
        Build infrastructure layer (snapshot store, audit log).

        Returns:
            InfrastructureComponents with the selected store backend
        """
        logger.info("Building infrastructure components (store=%s)...", self.config.store_backend)

        audit_logger = AuditLogger(self.config.audit_log_path, self.config.log_level)

        database: SQLiteDatabaseHandler | None = None
        store: SnapshotStore
        if self.config.store_backend == "firestore":
            # firebase-admin is only imported when the document store is selected
            from infrastructure.database.repositories.firestore_snapshots import FirestoreSnapshotRepository

            store = FirestoreSnapshotRepository.from_service_account(
                self.config.firebase_credentials,
                collection=self.config.firestore_collection,
            )
        else:
            database = SQLiteDatabaseHandler(self.config.database_path)
            database.create_tables()
            store = SnapshotRepository(database)

        logger.info("Infrastructure components initialized")
        return InfrastructureComponents(database=database, store=store, audit_logger=audit_logger)

    def build_mqtt_components(self, *, connect: bool) -> MQTTComponents:
        """
        Build the broker wrapper (if enabled and the runtime is starting).

        The wrapper connects asynchronously, so an unreachable broker does
        not block startup; paho keeps retrying in its network thread.
        """
        if not connect:
            logger.info("MQTT runtime not bootstrapped, skipping broker connection")
            return MQTTComponents(mqtt_client=None)
        if not self.config.enable_mqtt:
            logger.info("MQTT disabled, skipping MQTT components")
            return MQTTComponents(mqtt_client=None)

        logger.info("Building MQTT components...")
        configure_mqtt_logging(self.config.mqtt_log_path)
        mqtt_client = MQTTClientWrapper(
            broker=self.config.mqtt_broker_host,
            port=self.config.mqtt_broker_port,
            client_id=self.config.mqtt_client_id,
            username=self.config.mqtt_username or None,
            password=self.config.mqtt_password or None,
            use_tls=self.config.mqtt_tls,
            tls_insecure=self.config.mqtt_tls_insecure,
        )
        return MQTTComponents(mqtt_client=mqtt_client)

    def build_services(self, infra: InfrastructureComponents, mqtt: MQTTComponents) -> dict[str, Any]:
        """Wire the record, emitter, services and scheduler."""
        from app.extensions import socketio

        state = GreenhouseState()
        emitter_service = EmitterService(sio=socketio)

        snapshot_service = SnapshotService(state=state, store=infra.store, emitter=emitter_service)
        control_service = ControlService(
            mqtt_client=mqtt.mqtt_client,
            state=state,
            emitter=emitter_service,
            snapshot_service=snapshot_service,
            audit_logger=infra.audit_logger,
        )

        telemetry_service: TelemetryService | None = None
        if mqtt.mqtt_client is not None:
            telemetry_service = TelemetryService(mqtt_client=mqtt.mqtt_client, state=state, emitter=emitter_service)

        scheduler = SnapshotScheduler(
            save_fn=snapshot_service.save_scheduled,
            interval_seconds=self.config.save_interval_seconds,
        )

        return {
            "state": state,
            "emitter_service": emitter_service,
            "snapshot_service": snapshot_service,
            "control_service": control_service,
            "telemetry_service": telemetry_service,
            "scheduler": scheduler,
        }

    def build(self, *, start_runtime: bool = False) -> dict[str, Any]:
        """
        Build the complete service container.

        Args:
            start_runtime: Connect to the broker (the scheduler is started by
                the container once it exists)

        Returns:
            Dictionary with all components for ServiceContainer construction
        """
        infra = self.build_infrastructure()
        mqtt = self.build_mqtt_components(connect=start_runtime)
        services = self.build_services(infra, mqtt)

        return {
            "config": self.config,
            "database": infra.database,
            "store": infra.store,
            "audit_logger": infra.audit_logger,
            "mqtt_client": mqtt.mqtt_client,
            **services,
        }
