"""
Actuator Control API
====================

Routes:
- POST /api/control/<device> - Body {"status": "0" | "1"}; device is one of
  pump, valve, relay1, relay2
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from app.blueprints.api._common import get_container, get_json, success
from app.utils.http import safe_route

logger = logging.getLogger(__name__)

control_api = Blueprint("control_api", __name__, url_prefix="/api/control")


@control_api.post("/<device>")
@safe_route("Failed to send control command")
def set_device_status(device: str) -> Response:
    body = get_json()
    message = get_container().control_service.set_status(device, body.get("status"))
    return success(message=message)
