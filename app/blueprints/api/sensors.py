"""
Sensors API
===========

Routes:
- GET /api/sensors/current - Latest greenhouse record
- GET /api/sensors/history?limit=N - Stored snapshots, newest first
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, request

from app.blueprints.api._common import get_container, success
from app.constants import Pagination
from app.utils.http import safe_route
from app.utils.validation import validate_history_limit

logger = logging.getLogger(__name__)

sensors_api = Blueprint("sensors_api", __name__, url_prefix="/api/sensors")


@sensors_api.get("/current")
@safe_route("Failed to get current sensor data")
def get_current() -> Response:
    return success(get_container().state.snapshot())


@sensors_api.get("/history")
@safe_route("Failed to load sensor history")
def get_history() -> Response:
    """
    Stored snapshots, newest first.

    Query:
        limit: max documents (default 50; missing, invalid or 0 falls back to
        the default; capped at 500)
    """
    limit = validate_history_limit(
        request.args.get("limit"),
        default_limit=Pagination.HISTORY_DEFAULT_LIMIT,
        max_limit=Pagination.HISTORY_MAX_LIMIT,
    )
    history = get_container().snapshot_service.history(limit)
    return success(history)
