"""
Actuator Control Service
========================

Turns dashboard ON/OFF requests into broker commands.

A command is published to the actuator's topic first; the shared record,
the dashboard broadcast and the follow-up snapshot only happen once the
broker has accepted the message.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from app.constants import ACTUATOR_TOPICS
from app.domain.exceptions import DeviceError, NotFoundError
from app.domain.greenhouse_state import GreenhouseState
from app.enums.device import ActuatorDevice, ActuatorStatus
from app.enums.events import SaveReason
from app.schemas.events import ControlUpdatePayload
from app.utils.emitters import EmitterService
from app.utils.validation import validate_status

if TYPE_CHECKING:
    from app.hardware.mqtt.mqtt_broker_wrapper import MQTTClientWrapper
    from app.services.application.snapshot_service import SnapshotService
    from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


def resolve_device(name: str) -> ActuatorDevice:
    """Map a URL segment to an actuator, raising NotFoundError if unknown."""
    try:
        return ActuatorDevice(name)
    except ValueError:
        raise NotFoundError(f"Unknown device: {name}", detail={"device": name}) from None


class ControlService:
    """Publishes actuator commands and mirrors them into the record."""

    def __init__(
        self,
        mqtt_client: Optional["MQTTClientWrapper"],
        state: GreenhouseState,
        emitter: EmitterService,
        snapshot_service: "SnapshotService",
        audit_logger: Optional["AuditLogger"] = None,
    ):
        self.mqtt_client = mqtt_client
        self.state = state
        self.emitter = emitter
        self.snapshot_service = snapshot_service
        self.audit_logger = audit_logger

    def set_status(self, device: str, status: Any) -> str:
        """
        Switch an actuator on or off.

        Args:
            device: Actuator name (pump, valve, relay1, relay2)
            status: Exactly "0" or "1"

        Returns:
            Human readable confirmation, e.g. "Pump turned ON"

        Raises:
            ValidationError: status is not "0" or "1"
            NotFoundError: unknown device
            DeviceError: the broker did not accept the command
        """
        command = validate_status(status)
        actuator = resolve_device(device)

        try:
            self._publish(actuator, command)
        except DeviceError as exc:
            self._audit(actuator, command, "failure", error=str(exc))
            raise

        self.state.set_actuator(actuator, command)
        logger.info("%s %s", actuator.label, command.label)

        self.emitter.emit_control_update(ControlUpdatePayload(device=actuator, status=command.value))
        self.snapshot_service.save_snapshot(SaveReason(f"{actuator.value}_control"))
        self._audit(actuator, command, "success")

        return f"{actuator.label} turned {command.label}"

    def _publish(self, actuator: ActuatorDevice, command: ActuatorStatus) -> None:
        if self.mqtt_client is None:
            raise DeviceError("MQTT client not connected", detail={"device": actuator.value})
        self.mqtt_client.publish(ACTUATOR_TOPICS[actuator], command.value)

    def _audit(self, actuator: ActuatorDevice, command: ActuatorStatus, outcome: str, **metadata: Any) -> None:
        if self.audit_logger is None:
            return
        self.audit_logger.log_event(
            actor="api",
            action=f"turn_{command.label.lower()}",
            resource=actuator.value,
            outcome=outcome,
            topic=ACTUATOR_TOPICS[actuator],
            **metadata,
        )
