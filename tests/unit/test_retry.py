"""Tests for the retry orchestrator."""

import asyncio

import pytest
from hypothesis import given, settings, strategies as st

from roadmap_ai.core.document import ErrorKind
from roadmap_ai.generation.retry import (
    AttemptResult,
    Exhausted,
    ParseFailure,
    Success,
    ValidationFailure,
    with_retries,
)
from roadmap_ai.generation.validation import Invariant, Violation


class ScriptedAttempts:
    """Yields the given outcomes in order and counts calls."""

    def __init__(self, outcomes: list[AttemptResult[str]]) -> None:
        self._outcomes = outcomes
        self.calls = 0

    async def __call__(self) -> AttemptResult[str]:
        outcome = self._outcomes[min(self.calls, len(self._outcomes) - 1)]
        self.calls += 1
        return outcome


PARSE = ParseFailure(raw_text="oops", error="Expecting value")
INVALID = ValidationFailure(
    payload={}, violation=Violation(Invariant.SECTION_COUNT, "model returned 3 sections")
)


class TestWithRetries:
    @pytest.mark.asyncio
    async def test_first_success(self) -> None:
        attempts = ScriptedAttempts([Success("done")])
        completed = (await with_retries(attempts, max_attempts=3)).unwrap()
        assert completed.payload == "done"
        assert completed.attempts == 1
        assert attempts.calls == 1

    @pytest.mark.asyncio
    async def test_success_after_failure(self) -> None:
        attempts = ScriptedAttempts([INVALID, Success("done")])
        completed = (await with_retries(attempts, max_attempts=3)).unwrap()
        assert completed.attempts == 2
        assert attempts.calls == 2

    @pytest.mark.asyncio
    async def test_exhaustion_keeps_last_failure(self) -> None:
        attempts = ScriptedAttempts([INVALID, INVALID, PARSE])
        exhausted = (await with_retries(attempts, max_attempts=3)).unwrap_err()
        assert isinstance(exhausted, Exhausted)
        assert exhausted.attempts == 3
        assert exhausted.last_failure is PARSE
        assert attempts.calls == 3

    @pytest.mark.asyncio
    async def test_invalid_max_attempts(self) -> None:
        with pytest.raises(ValueError):
            await with_retries(ScriptedAttempts([Success("x")]), max_attempts=0)

    @pytest.mark.asyncio
    async def test_logs_each_failure(self, caplog: pytest.LogCaptureFixture) -> None:
        await with_retries(ScriptedAttempts([PARSE]), max_attempts=2, label="quiz")
        warnings = [r for r in caplog.records if r.levelname == "WARNING"]
        assert len(warnings) == 2
        assert "quiz attempt 1/2 failed" in warnings[0].getMessage()

    @pytest.mark.asyncio
    async def test_exhaustion_with_single_attempt(self) -> None:
        attempts = ScriptedAttempts([INVALID])
        exhausted = (await with_retries(attempts, max_attempts=1)).unwrap_err()
        assert exhausted.attempts == 1
        assert exhausted.last_failure is INVALID
        assert attempts.calls == 1

    @pytest.mark.asyncio
    async def test_attempt_exception_propagates_without_retry(self) -> None:
        calls = 0

        async def broken() -> AttemptResult[str]:
            nonlocal calls
            calls += 1
            raise RuntimeError("bug in attempt")

        with pytest.raises(RuntimeError, match="bug in attempt"):
            await with_retries(broken, max_attempts=3)
        assert calls == 1

    @pytest.mark.asyncio
    async def test_success_logged_after_retry(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level("INFO")
        await with_retries(ScriptedAttempts([PARSE, Success("ok")]), max_attempts=3, label="quiz")
        assert any("quiz succeeded on attempt 2/3" in r.getMessage() for r in caplog.records)

    @settings(max_examples=25, deadline=None)
    @given(
        st.integers(min_value=1, max_value=6),
        st.lists(st.booleans(), min_size=1, max_size=8),
    )
    def test_call_count_bounds(self, max_attempts: int, successes: list[bool]) -> None:
        attempts = ScriptedAttempts([Success("ok") if s else PARSE for s in successes])
        result = asyncio.run(with_retries(attempts, max_attempts=max_attempts))
        assert 1 <= attempts.calls <= max_attempts
        if result.is_ok():
            assert result.unwrap().attempts == attempts.calls
        else:
            assert attempts.calls == max_attempts


class TestExhausted:
    def test_validation_failure_maps_to_structural_violation(self) -> None:
        error = Exhausted(attempts=3, last_failure=INVALID).to_error("Failed")
        assert error.kind == ErrorKind.STRUCTURAL_VIOLATION
        assert error.detail == "section_count: model returned 3 sections"
        assert error.attempts == 3

    def test_parse_failure_keeps_kind(self) -> None:
        failure = ParseFailure(raw_text="", error="empty response", kind=ErrorKind.UPSTREAM_EMPTY)
        error = Exhausted(attempts=2, last_failure=failure).to_error("Failed")
        assert error.kind == ErrorKind.UPSTREAM_EMPTY
        assert error.message == "Failed"
