"""
Domain Package
==============
The shared greenhouse record and the exception hierarchy.
"""

from .exceptions import (
    ConfigurationError,
    DeviceError,
    GreenhouseError,
    NotFoundError,
    RepositoryError,
    ServiceError,
    ValidationError,
)
from .greenhouse_state import GreenhouseState

__all__ = [
    "ConfigurationError",
    "DeviceError",
    "GreenhouseError",
    "GreenhouseState",
    "NotFoundError",
    "RepositoryError",
    "ServiceError",
    "ValidationError",
]
