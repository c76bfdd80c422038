"""
Railway-Oriented Programming (ROP) helpers.

Explicit, composable error handling — adapters return Result instead of raising.

    from railway import Result, ErrorCode

    def decode(blob: bytes) -> Result[bytes]:
        if not blob:
            return Result.failure(ErrorCode.PARSE_ERROR, "empty blob")
        return Result.success(blob)
"""

from railway.assertions import ResultAssertions
from railway.execution import (
    ExecutionContext,
    LoggingExecutionContext,
    NoOpExecutionContext,
)
from railway.failure import ErrorCode, FailureDescription
from railway.result import Failure, Result, Success

__all__ = [
    "Result",
    "Success",
    "Failure",
    "ErrorCode",
    "FailureDescription",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ResultAssertions",
]
