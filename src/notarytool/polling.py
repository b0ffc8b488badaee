"""
Bounded status polling.

PollingEngine calls a status check repeatedly until the submission reaches a
terminal status (Accepted, Invalid, Rejected), the check returns an error,
or the attempt bound is reached:

    Polling(n) --error-------------------> Failed(error)
    Polling(n) --terminal status---------> Done(response)
    Polling(n) --non-terminal, n == max--> TimedOut
    Polling(n) --non-terminal, n <  max--> sleep(delay(n)) -> Polling(n + 1)

Errors are not retried: the first failed status check ends polling. Any
backoff is the caller's delay function. The engine has no cancellation of
its own; an exception raised by the delay function or progress callback
ends polling with a Failed outcome.
"""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from notarytool.api.responses import SubmissionStatusResponse
from notarytool.errors.exceptions import GeneralError, NotaryToolError, PollingTimeout
from notarytool.logging.utilities import error_fields, log_exception
from notarytool.types import DelayFunction, ProgressCallback

logger = logging.getLogger(__name__)

StatusCheck = Callable[
    [], tuple[SubmissionStatusResponse | None, NotaryToolError | None]
]


class PollingState(Enum):
    DONE = "done"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class PollingOutcome:
    """
    Terminal result of a polling run.

    Done case:
        state=DONE, response is the status response with a terminal status
    Failed case:
        state=FAILED, error is the status-check (or callback) error
    TimedOut case:
        state=TIMED_OUT, error is a PollingTimeout, response is the last
        non-terminal status response

    Attributes:
        state: Which terminal state polling ended in
        attempts: Number of status checks performed
        response: Last successful status response, if any
        error: Failure or timeout error (None when done)
    """

    state: PollingState
    attempts: int
    response: SubmissionStatusResponse | None = None
    error: NotaryToolError | None = None

    @classmethod
    def done(cls, response: SubmissionStatusResponse, attempts: int) -> "PollingOutcome":
        return cls(state=PollingState.DONE, attempts=attempts, response=response)

    @classmethod
    def failed(
        cls,
        error: NotaryToolError,
        attempts: int,
        response: SubmissionStatusResponse | None = None,
    ) -> "PollingOutcome":
        return cls(
            state=PollingState.FAILED, attempts=attempts, response=response, error=error
        )

    @classmethod
    def timed_out(
        cls, max_poll_count: int, response: SubmissionStatusResponse | None
    ) -> "PollingOutcome":
        return cls(
            state=PollingState.TIMED_OUT,
            attempts=max_poll_count,
            response=response,
            error=PollingTimeout(max_poll_count),
        )

    @property
    def is_done(self) -> bool:
        return self.state is PollingState.DONE

    @property
    def is_failed(self) -> bool:
        return self.state is PollingState.FAILED

    @property
    def is_timed_out(self) -> bool:
        return self.state is PollingState.TIMED_OUT


def _to_seconds(delay: float | timedelta) -> float:
    if isinstance(delay, timedelta):
        delay = delay.total_seconds()
    return max(float(delay), 0.0)


class PollingEngine:
    """
    Drives a status check until a terminal condition.

    Args:
        status_check: Zero-argument callable returning a status
            ``(response, error)`` tuple
        sleep: Blocking sleep function (seconds), replaceable in tests
    """

    def __init__(
        self,
        status_check: StatusCheck,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.status_check = status_check
        self._sleep = sleep

    def poll(
        self,
        max_poll_count: int,
        delay_function: DelayFunction,
        progress_callback: ProgressCallback | None = None,
    ) -> PollingOutcome:
        """
        Poll until done, failed or timed out.

        Args:
            max_poll_count: Maximum number of status checks (>= 1)
            delay_function: Seconds (or timedelta) to wait after attempt n
            progress_callback: Called with (attempt, response) after every
                successful status check, terminal or not

        Returns:
            PollingOutcome
        """
        if max_poll_count < 1:
            return PollingOutcome.failed(
                GeneralError(f"max_poll_count must be >= 1, got {max_poll_count}"),
                attempts=0,
            )

        last_response: SubmissionStatusResponse | None = None
        attempt = 1
        while True:
            response, error = self.status_check()
            if error is not None:
                logger.warning(
                    "Polling stopped on status check error",
                    extra={
                        "attempt": attempt,
                        "max_poll_count": max_poll_count,
                        "polling_state": PollingState.FAILED.value,
                        **error_fields(error),
                    },
                )
                return PollingOutcome.failed(error, attempts=attempt, response=last_response)

            last_response = response
            status = response.submission_info.status
            logger.debug(
                "Polled submission status",
                extra={
                    "attempt": attempt,
                    "max_poll_count": max_poll_count,
                    "submission_id": str(response.submission_info.id),
                    "status": status.value,
                },
            )

            try:
                if progress_callback is not None:
                    progress_callback(attempt, response)

                if status.is_terminal:
                    logger.info(
                        "Submission reached terminal status",
                        extra={
                            "attempt": attempt,
                            "submission_id": str(response.submission_info.id),
                            "status": status.value,
                            "polling_state": PollingState.DONE.value,
                        },
                    )
                    return PollingOutcome.done(response, attempts=attempt)

                if attempt >= max_poll_count:
                    logger.warning(
                        "Polling max count reached",
                        extra={
                            "attempt": attempt,
                            "max_poll_count": max_poll_count,
                            "submission_id": str(response.submission_info.id),
                            "status": status.value,
                            "polling_state": PollingState.TIMED_OUT.value,
                        },
                    )
                    return PollingOutcome.timed_out(max_poll_count, response)

                delay_seconds = _to_seconds(delay_function(attempt))
            except Exception as e:
                log_exception(
                    logger,
                    e,
                    "Polling aborted by callback",
                    level=logging.WARNING,
                    attempt=attempt,
                    polling_state=PollingState.FAILED.value,
                )
                return PollingOutcome.failed(
                    GeneralError(f"Polling aborted: {e}", cause=e),
                    attempts=attempt,
                    response=last_response,
                )

            logger.debug(
                "Waiting before next status poll",
                extra={"attempt": attempt, "delay_seconds": delay_seconds},
            )
            self._sleep(delay_seconds)
            attempt += 1


# =============================================================================
# Delay functions
# =============================================================================


def no_delay(attempt: int) -> float:
    """Poll again immediately."""
    return 0.0


def fixed_delay(seconds: float | timedelta) -> DelayFunction:
    """Same delay after every attempt."""
    delay_seconds = _to_seconds(seconds)

    def delay(attempt: int) -> float:
        return delay_seconds

    return delay


def exponential_backoff(
    base_delay: float = 5.0,
    max_delay: float = 300.0,
    factor: float = 2.0,
    jitter: bool = False,
) -> DelayFunction:
    """
    Exponentially growing delay, capped at ``max_delay``.

    Attempt 1 waits ``base_delay``, attempt 2 ``base_delay * factor``, and
    so on. With ``jitter`` the delay is half fixed, half random.
    """

    def delay(attempt: int) -> float:
        try:
            value = base_delay * (factor ** max(attempt - 1, 0))
        except OverflowError:
            value = max_delay
        if jitter:
            value = (value / 2) + random.uniform(0, value / 2)
        return min(value, max_delay)

    return delay


__all__ = [
    "PollingState",
    "PollingOutcome",
    "PollingEngine",
    "no_delay",
    "fixed_delay",
    "exponential_backoff",
]
