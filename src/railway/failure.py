"""
Failure description — structured error information for the failure track.

An ErrorCode enum plus an immutable FailureDescription carrying the message,
the originating exception (if any) and a UTC timestamp.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """
    Structured error codes for the failure track.

    Grouped by where the failure originates:
    - Input: PARSE, NOT_FOUND
    - Remote: EXTERNAL_SERVICE, RATE_LIMIT, TIMEOUT
    - Local: STORAGE, CONFIGURATION, TECHNICAL
    """

    PARSE_ERROR = "PARSE_ERROR"
    """Downloaded or stored data could not be decoded (archive, base64, CSV, PEM, DER)."""

    NOT_FOUND = "NOT_FOUND"
    """A resource that must already exist is missing."""

    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    """Remote call failed: bad HTTP status or transport error."""

    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    """Remote side refused the request because of request limits."""

    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    """Operation exceeded its time limit."""

    STORAGE_ERROR = "STORAGE_ERROR"
    """Local filesystem read, write, move or delete failed."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """System misconfiguration."""

    TECHNICAL_ERROR = "TECHNICAL_ERROR"
    """Unexpected infrastructure problem."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.PARSE_ERROR, "no certificates found")
    >>> desc.code
    <ErrorCode.PARSE_ERROR: 'PARSE_ERROR'>
    >>> desc.message
    'no certificates found'
    """

    code: ErrorCode
    message: str
    exception: BaseException | None = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def full_stack_trace(self) -> str:
        """Message followed by the formatted exception chain, if there is one."""
        if self.exception is None:
            return self.message
        tb = "".join(
            traceback.format_exception(
                type(self.exception), self.exception, self.exception.__traceback__
            )
        )
        return f"{self.message}\n{tb}"

    def __str__(self) -> str:
        if self.exception is None:
            return f"{self.code.value}: {self.message}"
        return f"{self.code.value}: {self.message} ({self.exception})"
