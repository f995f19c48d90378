"""
Input Validation Utilities
==========================

Parsing helpers for broker payloads and request parameters.

Broker payloads are plain text published by the ESP32 firmware; readings
follow ``parseFloat`` semantics (the longest leading numeric prefix wins,
``"23.5C"`` is 23.5) so that firmware which appends units keeps working.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Any, Optional

from app.domain.exceptions import ValidationError
from app.enums.device import ActuatorStatus

logger = logging.getLogger(__name__)

_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"[+-]?\d+")

STATUS_ERROR_MESSAGE = 'Status must be "0" or "1"'


# =============================================================================
# Payload Parsing
# =============================================================================

def parse_float(raw: Optional[str]) -> Optional[float]:
    """
    Parse the leading decimal number of a text payload.

    Returns None when the text has no numeric prefix or parses to a
    non-finite value; JSON has no encoding for NaN or Infinity.

    Args:
        raw: Decoded payload text

    Returns:
        Parsed float or None
    """
    if raw is None:
        return None

    match = _FLOAT_PREFIX.match(raw.lstrip())
    if not match:
        return None

    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def parse_int_prefix(raw: Any) -> Optional[int]:
    """Parse the leading integer of a query value, or None if there is none."""
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw

    match = _INT_PREFIX.match(str(raw).strip())
    return int(match.group(0)) if match else None


# =============================================================================
# Request Validators
# =============================================================================

def validate_history_limit(
    raw: Any,
    default_limit: int = 50,
    max_limit: int = 500,
) -> int:
    """
    Normalize the ``limit`` query parameter for history listings.

    Missing, non-numeric, zero and negative values fall back to the default;
    anything above ``max_limit`` is capped.

    Args:
        raw: Raw query value
        default_limit: Fallback limit
        max_limit: Upper bound

    Returns:
        Validated limit
    """
    limit = parse_int_prefix(raw)
    if not limit or limit < 1:
        limit = default_limit
    return min(limit, max_limit)


def validate_status(value: Any) -> ActuatorStatus:
    """
    Validate an actuator command.

    Only the exact strings "0" and "1" are accepted; numbers, booleans and
    padded strings are rejected.

    Raises:
        ValidationError: If the value is not "0" or "1"
    """
    if not isinstance(value, str):
        raise ValidationError(STATUS_ERROR_MESSAGE, detail={"status": value})
    try:
        return ActuatorStatus(value)
    except ValueError:
        raise ValidationError(STATUS_ERROR_MESSAGE, detail={"status": value}) from None
