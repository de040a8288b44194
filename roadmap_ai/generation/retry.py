"""Bounded retry loop around a single generation attempt.

An attempt reports one of three outcomes: ``Success``, ``ParseFailure``
or ``ValidationFailure``. Failures are retried immediately, with no
wait between calls, until ``max_attempts`` is reached; what to do after
that is the caller's decision, so exhaustion is returned rather than
raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt

from roadmap_ai.core.document import ErrorKind, GenerationError
from roadmap_ai.core.result import Err, Ok, Result
from roadmap_ai.generation.validation import Violation

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    payload: T


@dataclass(frozen=True, slots=True)
class ParseFailure:
    raw_text: str
    error: str
    kind: ErrorKind = ErrorKind.UPSTREAM_PARSE

    @property
    def reason(self) -> str:
        return f"{self.kind.value}: {self.error}"


@dataclass(frozen=True, slots=True)
class ValidationFailure:
    payload: Any
    violation: Violation

    @property
    def reason(self) -> str:
        return str(self.violation)


AttemptResult = Union[Success[T], ParseFailure, ValidationFailure]
Failure = Union[ParseFailure, ValidationFailure]


@dataclass(frozen=True, slots=True)
class Completed(Generic[T]):
    """An attempt succeeded; ``attempts`` counts the calls it took."""

    payload: T
    attempts: int


@dataclass(frozen=True, slots=True)
class Exhausted:
    """Every attempt failed; ``last_failure`` is the final one."""

    attempts: int
    last_failure: Failure

    @property
    def reason(self) -> str:
        return self.last_failure.reason

    def to_error(self, message: str) -> GenerationError:
        if isinstance(self.last_failure, ValidationFailure):
            kind = ErrorKind.STRUCTURAL_VIOLATION
        else:
            kind = self.last_failure.kind
        return GenerationError(
            message=message, detail=self.reason, kind=kind, attempts=self.attempts
        )


async def with_retries(
    attempt_fn: Callable[[], Awaitable[AttemptResult[T]]],
    max_attempts: int = 3,
    label: str = "generation",
) -> Result[Completed[T], Exhausted]:
    """Call ``attempt_fn`` until it succeeds or ``max_attempts`` calls were made.

    Args:
        attempt_fn: Performs one attempt and classifies its outcome.
        max_attempts: Upper bound on calls; must be at least 1.
        label: Names the operation in log lines.

    Returns:
        Ok(Completed) with the successful payload, or Err(Exhausted)
        carrying the last failure.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    def log_failure(retry_state: RetryCallState) -> None:
        failure = retry_state.outcome.result()  # type: ignore[union-attr]
        logger.warning(
            "%s attempt %d/%d failed: %s",
            label, retry_state.attempt_number, max_attempts, failure.reason,
        )

    def exhausted(retry_state: RetryCallState) -> Exhausted:
        return Exhausted(
            attempts=retry_state.attempt_number,
            last_failure=retry_state.outcome.result(),  # type: ignore[union-attr]
        )

    calls = 0

    async def counted_attempt() -> AttemptResult[T]:
        nonlocal calls
        calls += 1
        return await attempt_fn()

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        retry=retry_if_result(lambda outcome: not isinstance(outcome, Success)),
        after=log_failure,
        retry_error_callback=exhausted,
    )
    outcome = await retrying(counted_attempt)

    if isinstance(outcome, Exhausted):
        return Err(outcome)
    if calls > 1:
        logger.info("%s succeeded on attempt %d/%d", label, calls, max_attempts)
    return Ok(Completed(payload=outcome.payload, attempts=calls))
