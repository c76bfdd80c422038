"""
Tests for the railway package — Result, FailureDescription, execution contexts, assertions.

Tests cover:
  - Success/Failure creation and introspection
  - map, flat_map, ensure transformations
  - Side effects (peek, peek_failure)
  - from_computation exception capture
  - Pattern matching, equality and repr
  - Logging execution context
"""

from __future__ import annotations

import pytest

from railway import (
    ErrorCode,
    ExecutionContext,
    Failure,
    FailureDescription,
    LoggingExecutionContext,
    NoOpExecutionContext,
    Result,
    ResultAssertions,
    Success,
)

# ═══════════════════════════════════════════════════════════════
# 1. Creation & Introspection
# ═══════════════════════════════════════════════════════════════


class TestSuccessCreation:
    def test_success_wraps_value(self):
        result = Result.success(42)
        assert result.is_success()
        assert not result.is_failure()
        assert result.value() == 42

    def test_success_may_carry_none(self):
        assert Result.success(None).value() is None

    def test_success_is_truthy(self):
        assert Result.success(b"pem")

    def test_error_on_success_raises(self):
        with pytest.raises(ValueError, match="has no error"):
            Result.success(1).error()


class TestFailureCreation:
    def test_failure_with_code_and_message(self):
        result = Result.failure(ErrorCode.PARSE_ERROR, "error parsing certificates")
        assert result.is_failure()
        assert result.error().code == ErrorCode.PARSE_ERROR
        assert result.error().message == "error parsing certificates"

    def test_failure_with_exception(self):
        ex = OSError("disk full")
        result = Result.failure(ErrorCode.STORAGE_ERROR, "write failed", ex)
        assert result.error().exception is ex

    def test_failure_from_description(self):
        desc = FailureDescription(ErrorCode.NOT_FOUND, "store missing")
        assert Result.failure_from(desc).error() == desc

    def test_failure_is_falsy(self):
        assert not Result.failure(ErrorCode.PARSE_ERROR, "bad")

    def test_value_on_failure_raises(self):
        with pytest.raises(ValueError, match="store missing"):
            Result.failure(ErrorCode.NOT_FOUND, "store missing").value()


# ═══════════════════════════════════════════════════════════════
# 2. Transformations
# ═══════════════════════════════════════════════════════════════


class TestTransformations:
    def test_map_success(self):
        assert Result.success(5).map(lambda x: x * 2).value() == 10

    def test_map_short_circuits(self):
        called = []
        result = Result.failure(ErrorCode.TIMEOUT_ERROR, "slow").map(called.append)
        assert result.is_failure()
        assert called == []

    def test_flat_map_chains(self):
        result = Result.success(b"ab").flat_map(lambda data: Result.success(len(data)))
        assert result.value() == 2

    def test_flat_map_propagates_inner_failure(self):
        result = Result.success(1).flat_map(
            lambda _: Result.failure(ErrorCode.RATE_LIMIT_ERROR, "429")
        )
        assert result.error().code == ErrorCode.RATE_LIMIT_ERROR

    def test_ensure_passes(self):
        assert Result.success([1]).ensure(bool, ErrorCode.PARSE_ERROR, "empty").is_success()

    def test_ensure_fails_with_code(self):
        result = Result.success([]).ensure(bool, ErrorCode.PARSE_ERROR, "no microsoft urls found")
        assert result.error().code == ErrorCode.PARSE_ERROR
        assert result.error().message == "no microsoft urls found"

    def test_ensure_accepts_description(self):
        desc = FailureDescription(ErrorCode.STORAGE_ERROR, "empty file")
        assert Result.success(b"").ensure(bool, desc).error() == desc

    def test_either(self):
        assert Result.success(3).either(lambda v: v + 1, lambda e: -1) == 4
        assert Result.failure(ErrorCode.NOT_FOUND, "x").either(lambda v: v, lambda e: e.code) == (
            ErrorCode.NOT_FOUND
        )


class TestSideEffects:
    def test_peek_runs_on_success_only(self):
        seen = []
        Result.success(1).peek(seen.append)
        Result.failure(ErrorCode.NOT_FOUND, "x").peek(seen.append)
        assert seen == [1]

    def test_peek_failure_runs_on_failure_only(self):
        seen = []
        Result.success(1).peek_failure(seen.append)
        Result.failure(ErrorCode.NOT_FOUND, "x").peek_failure(lambda e: seen.append(e.code))
        assert seen == [ErrorCode.NOT_FOUND]


class TestFromComputation:
    def test_captures_value(self):
        assert Result.from_computation(lambda: 7, ErrorCode.PARSE_ERROR, "bad").value() == 7

    def test_captures_exception(self):
        def explode():
            raise ValueError("not DER")

        result = Result.from_computation(explode, ErrorCode.PARSE_ERROR, "parse failed")
        assert result.error().code == ErrorCode.PARSE_ERROR
        assert isinstance(result.error().exception, ValueError)
        assert "not DER" in result.error().full_stack_trace()


# ═══════════════════════════════════════════════════════════════
# 3. Pattern matching, equality, repr
# ═══════════════════════════════════════════════════════════════


class TestDunder:
    def test_match_case(self):
        match Result.success("pool"):
            case Success(value):
                assert value == "pool"
            case Failure(_):
                pytest.fail("expected success")

    def test_equality(self):
        assert Result.success(1) == Result.success(1)
        assert Result.failure(ErrorCode.NOT_FOUND, "x") == Result.failure(ErrorCode.NOT_FOUND, "x")
        assert Result.success(1) != Result.failure(ErrorCode.NOT_FOUND, "x")

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(Result.success(1))

    def test_repr(self):
        assert repr(Result.success(1)) == "Success(1)"
        assert repr(Result.failure(ErrorCode.NOT_FOUND, "gone")) == "Failure(NOT_FOUND: 'gone')"

    def test_failure_description_str(self):
        desc = FailureDescription(ErrorCode.STORAGE_ERROR, "write failed", OSError("full"))
        assert str(desc) == "STORAGE_ERROR: write failed (full)"


# ═══════════════════════════════════════════════════════════════
# 4. Execution contexts and assertions
# ═══════════════════════════════════════════════════════════════


class TestExecutionContexts:
    def test_noop_passthrough(self):
        assert NoOpExecutionContext().execute(lambda: Result.success(42)).value() == 42

    def test_logging_context_returns_inner_result(self):
        ctx = LoggingExecutionContext(operation="update:nss")
        result = ctx.execute(lambda: Result.failure(ErrorCode.NOT_FOUND, "missing"))
        assert result.error().code == ErrorCode.NOT_FOUND

    def test_logging_context_catches_exception(self):
        def failing():
            raise RuntimeError("exploded")

        result = LoggingExecutionContext(operation="boom").execute(failing)
        assert result.error().code == ErrorCode.TECHNICAL_ERROR
        assert isinstance(result.error().exception, RuntimeError)

    def test_protocol(self):
        assert isinstance(LoggingExecutionContext(), ExecutionContext)
        assert isinstance(NoOpExecutionContext(), ExecutionContext)


class TestResultAssertions:
    def test_assert_success_returns_value(self):
        assert ResultAssertions.assert_success(Result.success(5)) == 5

    def test_assert_success_on_failure_raises(self):
        with pytest.raises(AssertionError, match="Expected Success"):
            ResultAssertions.assert_success(Result.failure(ErrorCode.NOT_FOUND, "x"))

    def test_assert_failure_wrong_code_raises(self):
        with pytest.raises(AssertionError, match="Expected error code"):
            ResultAssertions.assert_failure(
                Result.failure(ErrorCode.NOT_FOUND, "x"), ErrorCode.PARSE_ERROR
            )

    def test_assert_failure_message_contains_is_case_insensitive(self):
        ResultAssertions.assert_failure_message_contains(
            Result.failure(ErrorCode.PARSE_ERROR, "Error Decoding PEM to TLS"),
            "error decoding pem",
        )
