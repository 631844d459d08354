"""Verdict policy: error handling, rate-limit handling and bounded retries."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from .config import RateLimitExceededBehavior, ValidatorConfig
from .models import LookupResult, Status, ValidationError

PWNED = "pwned"
ERROR = "error"
TOO_MANY_REQUESTS = "tooManyRequests"
UNKNOWN_ERROR = "unknownError"


class Deadline:
    """Caller-supplied bound on a validation, optionally cancellable.

    ``expires_at`` is a ``time.monotonic()`` timestamp; ``cancel_event``
    aborts the retry wait as soon as it is set.
    """

    def __init__(
        self,
        expires_at: float | None = None,
        cancel_event: threading.Event | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.expires_at = expires_at
        self.cancel_event = cancel_event
        self._clock = clock

    @classmethod
    def after(
        cls,
        seconds: float,
        cancel_event: threading.Event | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> Deadline:
        return cls(clock() + seconds, cancel_event, clock=clock)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def remaining(self) -> float | None:
        """Seconds left, or None when there is no time bound."""
        if self.expires_at is None:
            return None
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        if self.cancelled:
            return True
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def wait(self, seconds: float, sleep: Callable[[float], None] = time.sleep) -> bool:
        """Wait up to ``seconds``; return False if cancelled or out of time."""
        remaining = self.remaining()
        if remaining is not None and remaining < seconds:
            return False
        if self.cancel_event is not None:
            return not self.cancel_event.wait(seconds)
        sleep(seconds)
        return not self.expired()


@dataclass(frozen=True)
class Decision:
    """Final verdict of a validation."""

    status: Status
    errors: tuple[ValidationError, ...] = ()
    attempts: int = 1

    @property
    def valid(self) -> bool:
        return not self.errors


class PolicyEngine:
    """Turns lookup results into verdicts according to the configured policies."""

    def __init__(
        self,
        config: ValidatorConfig,
        *,
        logger: logging.Logger,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._config = config
        self._logger = logger
        self._sleep = sleep

    def decide(self, result: LookupResult) -> tuple[ValidationError, ...]:
        """Map a non rate-limited result to the errors to report."""
        if result.status is Status.PASSWORD_OK:
            return ()
        if result.status is Status.PASSWORD_PWNED:
            return (ValidationError(PWNED),)
        if result.status is Status.TOO_MANY_REQUESTS:
            return self._rate_limit_errors()
        if self._config.fail_on_error:
            return (ValidationError(ERROR, {"code": result.error_code}),)
        self._logger.info("Ignoring %s because fail_on_error is disabled", result.status.name)
        return ()

    def _rate_limit_errors(self) -> tuple[ValidationError, ...]:
        behavior = self._config.rate_limit_behavior
        if behavior is RateLimitExceededBehavior.IGNORE:
            return ()
        if behavior is RateLimitExceededBehavior.FAIL:
            return (ValidationError(TOO_MANY_REQUESTS),)
        # RETRY gave up
        if self._config.fail_on_error:
            return (ValidationError(TOO_MANY_REQUESTS),)
        return ()

    def evaluate(
        self,
        attempt: Callable[[float | None], LookupResult],
        deadline: Deadline | None = None,
    ) -> Decision:
        """Run ``attempt`` until a verdict is reached.

        ``attempt`` receives the remaining deadline in seconds (or None) and
        returns a result whose status has already been range-checked.
        """
        attempts = 0
        while True:
            if deadline is not None and deadline.expired():
                if attempts:
                    return self._give_up(attempts)
                self._logger.warning("Deadline expired before the range lookup was issued")
                result = LookupResult(Status.UNKNOWN_API_ERROR)
                return Decision(result.status, self.decide(result), attempts)

            result = attempt(deadline.remaining() if deadline is not None else None)
            attempts += 1
            if (
                result.status is not Status.TOO_MANY_REQUESTS
                or self._config.rate_limit_behavior is not RateLimitExceededBehavior.RETRY
            ):
                return Decision(result.status, self.decide(result), attempts)

            if attempts > self._config.max_retries:
                return self._give_up(attempts)
            delay = self._config.retry_delay
            self._logger.info(
                "Rate limited; retrying in %.1fs (retry %d of %d)",
                delay,
                attempts,
                self._config.max_retries,
            )
            if deadline is None:
                self._sleep(delay)
            elif not deadline.wait(delay, sleep=self._sleep):
                return self._give_up(attempts)

    def _give_up(self, attempts: int) -> Decision:
        self._logger.warning("Giving up on rate-limited range lookup after %d attempt(s)", attempts)
        return Decision(Status.TOO_MANY_REQUESTS, self._rate_limit_errors(), attempts)
