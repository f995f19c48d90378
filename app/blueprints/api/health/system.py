"""
System Health Endpoints
=======================

Bridge health: broker connectivity and the periodic snapshot loop.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Response

from app.blueprints.api._common import get_container as _container, success as _success
from app.utils.http import safe_route
from app.utils.time import iso_now

logger = logging.getLogger("health_api")


def _mqtt_health(container) -> dict[str, Any] | None:
    mqtt_client = container.mqtt_client
    if mqtt_client is None:
        return None
    health = mqtt_client.health_status.to_dict()
    health["endpoint"] = mqtt_client.endpoint
    return health


def register_system_routes(health_api: Blueprint):
    """Register system health routes on the blueprint."""

    @health_api.get("")
    @safe_route("Failed to get bridge health")
    def get_health() -> Response:
        """
        Returns:
            {
                "status": "healthy|degraded",
                "mqttConnected": bool,
                "mqtt": {...} | null,
                "scheduler": {...},
                "telemetry": {...} | null,
                "timestamp": "..."
            }
        """
        container = _container()
        mqtt_connected = container.mqtt_connected
        scheduler_status = container.scheduler.get_status()
        healthy = mqtt_connected and scheduler_status["running"]

        return _success(
            {
                "status": "healthy" if healthy else "degraded",
                "mqttConnected": mqtt_connected,
                "mqtt": _mqtt_health(container),
                "scheduler": scheduler_status,
                "telemetry": container.telemetry_service.get_stats() if container.telemetry_service else None,
                "timestamp": iso_now(),
            },
            message="Server is running",
        )

    @health_api.get("/ping")
    @safe_route("Failed to handle ping request")
    def ping() -> Response:
        """Basic liveness check for monitoring tools."""
        return _success({"status": "ok", "timestamp": iso_now()})
