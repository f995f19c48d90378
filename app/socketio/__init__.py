"""
Socket.IO Event Handlers
========================

Namespaces:
- / (default) - Dashboard sessions: initialData on connect, then broadcasts

Usage:
    Call register_handlers() before the first socketio.init_app(); the
    collected handlers are then attached to every server init_app creates.

    from app.socketio import register_handlers
    register_handlers()
"""

import logging

logger = logging.getLogger(__name__)


def register_handlers():
    """
    Register all Socket.IO event handlers.

    Must run before the first socketio.init_app() so the decorators queue
    the handlers instead of binding them to a single server.
    """
    # Import handlers to trigger @socketio.on() decorator registration
    from . import dashboard_handlers  # noqa: F401

    logger.info("Socket.IO handlers registered (dashboard)")
