"""Error codes attached to log records and metrics labels."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"  # Connection refused, timeout, protocol error
    MALFORMED_PERCENTAGE = "MALFORMED_PERCENTAGE"  # Stored percentage is not an integer


__all__ = ["ErrorCode"]
