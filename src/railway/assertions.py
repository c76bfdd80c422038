"""
pytest helpers for Result values.

Each helper returns what the test usually wants next (the value, or the
FailureDescription), so a check and an unwrap are one line:

    pool = ResultAssertions.assert_success(stores.get_nss())
    error = ResultAssertions.assert_failure(builder.build(path), ErrorCode.NOT_FOUND)
"""

from __future__ import annotations

from typing import TypeVar

from railway.failure import ErrorCode, FailureDescription
from railway.result import Result

T = TypeVar("T")


def _suffix(note: str) -> str:
    return f" ({note})" if note else ""


class ResultAssertions:
    @staticmethod
    def assert_success(result: Result[T], note: str = "") -> T:
        if result.is_failure():
            raise AssertionError(f"Expected Success, got {result.error()}{_suffix(note)}")
        return result.value()

    @staticmethod
    def assert_failure(
        result: Result[T],
        expected_code: ErrorCode | None = None,
        note: str = "",
    ) -> FailureDescription:
        """Fail the test unless `result` is a Failure with `expected_code` (when given)."""
        if result.is_success():
            raise AssertionError(f"Expected Failure, got {result!r}{_suffix(note)}")
        error = result.error()
        if expected_code is not None and error.code is not expected_code:
            raise AssertionError(
                f"Expected error code {expected_code.value}, got {error}{_suffix(note)}"
            )
        return error

    @staticmethod
    def assert_failure_message_contains(result: Result[T], fragment: str) -> FailureDescription:
        """Case-insensitive substring check on the failure message."""
        error = ResultAssertions.assert_failure(result)
        if fragment.lower() not in error.message.lower():
            raise AssertionError(f"{fragment!r} not found in failure message {error.message!r}")
        return error
