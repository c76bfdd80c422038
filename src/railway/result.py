"""
Result type — a value on the success track or a FailureDescription on the failure track.

Every adapter boundary in grootstore returns a Result. Stages are joined with
flat_map; the first failure rides through the remaining stages untouched:

    fetch ──ok──▶ normalize ──ok──▶ write ──ok──▶ build ──▶ Success(TrustPool)
      │              │                │             │
      └──────────────┴────────────────┴─────────────┴────▶ Failure(description)

Success and Failure each implement the combinators for their own track, so
no method has to branch on the state. Both support structural pattern matching:

    match stores.get(Vendor.NSS):
        case Success(pool):
            ...
        case Failure(error):
            ...
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from railway.failure import ErrorCode, FailureDescription

T = TypeVar("T")
U = TypeVar("U")
R = TypeVar("R")


class Result(Generic[T]):
    """
    Common interface of Success and Failure.

    Build instances with the static factories:

        >>> Result.success(b"pem").map(len).value()
        3
        >>> Result.failure(ErrorCode.NOT_FOUND, "no store").is_failure()
        True
    """

    __slots__ = ()

    def is_success(self) -> bool:
        raise NotImplementedError

    def is_failure(self) -> bool:
        return not self.is_success()

    def value(self) -> T:
        """The success value; raises ValueError on a Failure."""
        raise NotImplementedError

    def error(self) -> FailureDescription:
        """The failure description; raises ValueError on a Success."""
        raise NotImplementedError

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        raise NotImplementedError

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        """Apply a plain function to the success value."""
        raise NotImplementedError

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        """Apply a Result-returning function to the success value."""
        raise NotImplementedError

    def ensure(
        self,
        predicate: Callable[[T], bool],
        error: FailureDescription | ErrorCode,
        message: str = "",
    ) -> Result[T]:
        """
        Turn a success into a failure when `predicate` rejects its value.

            fetcher.get(url).ensure(bool, ErrorCode.PARSE_ERROR, "empty body")
        """
        description = (
            FailureDescription(code=error, message=message)
            if isinstance(error, ErrorCode)
            else error
        )
        return self.flat_map(
            lambda v: self if predicate(v) else Result.failure_from(description)
        )

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        """Run `action` on the success value; the Result is returned unchanged."""
        return self

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        """Run `action` on the failure description; the Result is returned unchanged."""
        return self

    @staticmethod
    def success(value: T) -> Result[T]:
        return Success(value)

    @staticmethod
    def failure_from(error: FailureDescription) -> Result[T]:
        return Failure(error)

    @staticmethod
    def failure(
        code: ErrorCode,
        message: str,
        exception: BaseException | None = None,
    ) -> Result[T]:
        return Failure(FailureDescription(code=code, message=message, exception=exception))

    @staticmethod
    def from_computation(
        computation: Callable[[], T],
        error_code: ErrorCode,
        error_message: str,
    ) -> Result[T]:
        """
        Run `computation`; an exception it raises becomes a failure.

        This is the adapter-boundary helper:

            Result.from_computation(
                lambda: store_file.read_bytes(),
                ErrorCode.STORAGE_ERROR,
                f"Failed to read store file {store_file}",
            )
        """
        try:
            return Success(computation())
        except Exception as e:
            return Failure(FailureDescription(error_code, error_message, e))

    def __bool__(self) -> bool:
        return self.is_success()

    __hash__ = None  # type: ignore[assignment]


class Success(Result[T]):
    """Success track."""

    __slots__ = ("_value",)
    __match_args__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def is_success(self) -> bool:
        return True

    def value(self) -> T:
        return self._value

    def error(self) -> FailureDescription:
        raise ValueError(f"Success({self._value!r}) has no error")

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        return on_success(self._value)

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Success(mapper(self._value))

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return mapper(self._value)

    def peek(self, action: Callable[[T], Any]) -> Result[T]:
        action(self._value)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return isinstance(other, Success) and self._value == other._value

    def __repr__(self) -> str:
        return f"Success({self._value!r})"


class Failure(Result[T]):
    """Failure track. Equality compares code and message only."""

    __slots__ = ("_error",)
    __match_args__ = ("_error",)

    def __init__(self, error: FailureDescription) -> None:
        self._error = error

    def is_success(self) -> bool:
        return False

    def value(self) -> T:
        raise ValueError(f"Cannot get value from a Failure: {self._error.message}")

    def error(self) -> FailureDescription:
        return self._error

    def either(
        self,
        on_success: Callable[[T], R],
        on_failure: Callable[[FailureDescription], R],
    ) -> R:
        return on_failure(self._error)

    def map(self, mapper: Callable[[T], U]) -> Result[U]:
        return Failure(self._error)

    def flat_map(self, mapper: Callable[[T], Result[U]]) -> Result[U]:
        return Failure(self._error)

    def peek_failure(self, action: Callable[[FailureDescription], Any]) -> Result[T]:
        action(self._error)
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return (
            isinstance(other, Failure)
            and self._error.code == other._error.code
            and self._error.message == other._error.message
        )

    def __repr__(self) -> str:
        return f"Failure({self._error.code.value}: {self._error.message!r})"
