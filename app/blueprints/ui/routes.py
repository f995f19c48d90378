from __future__ import annotations

import logging
from pathlib import Path

from flask import Blueprint, Response, current_app, send_from_directory

ui_bp = Blueprint("ui", __name__)
logger = logging.getLogger(__name__)


@ui_bp.get("/")
def index() -> Response:
    """Serve the dashboard entry page from the public directory."""
    public_dir = Path(current_app.config["PUBLIC_DIR"])
    return send_from_directory(public_dir, "index.html")
