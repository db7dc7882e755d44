"""Error taxonomy used at the API boundary.

The engine and service signal failure with ``None``; only the API facade
turns that into one of these exceptions for a transport to map onto its own
status codes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    INVALID_ACTION = "invalid_action"
    VALIDATION_FAILED = "validation_failed"


class BroadsideError(Exception):
    """Base class for failures reported to API callers."""

    kind: ErrorKind = ErrorKind.INVALID_ACTION

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class MatchNotFound(BroadsideError):
    kind = ErrorKind.NOT_FOUND


class InvalidAction(BroadsideError):
    kind = ErrorKind.INVALID_ACTION


class ValidationFailed(BroadsideError):
    """Malformed input, rejected before it reaches the engine."""

    kind = ErrorKind.VALIDATION_FAILED
