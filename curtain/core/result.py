"""Explicit outcome of a single store lookup.

Every store access made by the gate is wrapped into a ``LookupResult`` so that
callers branch on ``status`` instead of relying on exceptions escaping.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from curtain.core.errors import ErrorCode


class LookupStatus(Enum):
    FOUND = "found"
    ABSENT = "absent"
    FAILED = "failed"


@dataclass
class LookupResult:
    status: LookupStatus
    value: Any = None
    error: Optional[BaseException] = None
    error_code: Optional[ErrorCode] = None

    @classmethod
    def found(cls, value: Any) -> "LookupResult":
        return cls(status=LookupStatus.FOUND, value=value)

    @classmethod
    def absent(cls) -> "LookupResult":
        return cls(status=LookupStatus.ABSENT)

    @classmethod
    def failed(cls, error: BaseException, error_code: ErrorCode) -> "LookupResult":
        return cls(status=LookupStatus.FAILED, error=error, error_code=error_code)


__all__ = ["LookupResult", "LookupStatus"]
