"""Centralized exception hierarchy for the greenhouse bridge.

All domain and service exceptions inherit from :class:`GreenhouseError` so
that callers can catch a single base class when they need a broad safety net,
yet still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    GreenhouseError (base, maps to 500)
    ├── ValidationError          (400: bad input from caller)
    ├── NotFoundError            (404: unknown device / resource)
    ├── ServiceError             (500: business-logic failure)
    │   └── RepositoryError      (500: snapshot store failure)
    ├── DeviceError              (503: broker communication)
    └── ConfigurationError       (500: missing / invalid config)
"""

from __future__ import annotations


class GreenhouseError(Exception):
    """Base exception for all greenhouse bridge errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class opts in).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500
    expose_message: bool = False

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(GreenhouseError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class NotFoundError(GreenhouseError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(GreenhouseError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Snapshot store / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class DeviceError(GreenhouseError):
    """Broker communication failure (HTTP 503).

    The broker's error text is returned to the caller so the dashboard can
    show why a command did not go out.
    """

    http_status: int = 503
    expose_message: bool = True


class ConfigurationError(GreenhouseError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
