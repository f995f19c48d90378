from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import Response, jsonify

from app.utils.time import iso_now

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Generic user-facing messages; internals are never sent
# ---------------------------------------------------------------------------
_GENERIC_MESSAGES: dict[int, str] = {
    400: "Invalid request",
    404: "Resource not found",
    405: "Method not allowed",
    413: "Request payload too large",
    500: "An internal error occurred",
    503: "Service unavailable",
}


def safe_error(
    exc: BaseException,
    status: int = 500,
    *,
    context: str = "",
) -> Response:
    """Return a generic error response while logging the real exception.

    Use this instead of ``error_response(str(e), …)`` to prevent internal
    details (file paths, SQL fragments, broker hostnames) from leaking to
    clients.

    Parameters
    ----------
    exc:
        The caught exception. Logged server-side, **never** sent to the
        client.
    status:
        HTTP status code for the response (determines the generic message).
    context:
        Optional human-readable context string logged alongside *exc*,
        e.g. ``"loading snapshot history"``.
    """
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    message = _GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500])
    return error_response(message, status)


def domain_error(exc: BaseException, *, context: str = "") -> Response:
    """Map a :class:`GreenhouseError` to its status code and envelope.

    4xx messages were written for the caller and are returned as-is; 5xx
    messages are replaced by a generic one unless the exception class sets
    ``expose_message``.
    """
    status = getattr(exc, "http_status", 500)
    if status < 500:
        return error_response(str(exc) or _GENERIC_MESSAGES.get(status, "Request failed"), status)
    if getattr(exc, "expose_message", False) and str(exc):
        _log.warning("API error [%s] %s: %s", status, context, exc)
        return error_response(str(exc), status)
    return safe_error(exc, status, context=context)


def success_response(
    data: dict | list | None = None,
    status: int = 200,
    *,
    message: str | None = None,
) -> Response:
    # "success" is the flag the dashboard branches on; "ok" is kept alongside it
    payload: dict[str, Any] = {"ok": True, "success": True, "data": data, "error": None}
    if message is not None:
        payload["message"] = message
    response = jsonify(payload)
    response.status_code = status
    return response


def error_response(message: str, status: int = 500) -> Response:
    response_body: dict[str, Any] = {
        "ok": False,
        "success": False,
        "data": None,
        "error": message,
        "message": message,
        "timestamp": iso_now(),
    }
    response = jsonify(response_body)
    response.status_code = status
    return response


# ---------------------------------------------------------------------------
# Route decorator
# ---------------------------------------------------------------------------


def safe_route(
    error_message: str = "An internal error occurred",
    *,
    error_status: int = 500,
) -> Callable:
    """Decorator that wraps a Flask route handler with standardized error handling.

    Catches :class:`~app.domain.exceptions.GreenhouseError` subclasses and maps
    them to the correct HTTP status via ``exc.http_status``. Any other
    ``Exception`` is logged and returns a generic 500.

    Usage::

        @sensors_api.get("/history")
        @safe_route("Failed to load sensor history")
        def get_history():
            ...

    Parameters
    ----------
    error_message:
        Context logged with the failure and used as fallback for 4xx errors
        that carry no message.
    error_status:
        Default HTTP status for non-GreenhouseError exceptions (default 500).
    """
    from app.domain.exceptions import GreenhouseError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except GreenhouseError as exc:
                return domain_error(exc, context=error_message)
            except Exception as exc:
                return safe_error(exc, error_status, context=error_message)

        return wrapper

    return decorator
