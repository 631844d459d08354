"""Password validator backed by the Pwned Passwords range API."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from types import TracebackType

from .client import RangeLookupClient
from .config import ValidatorConfig
from .decorators import identity_decorator
from .hashing import ensure_digest_available, sha1_hex, split_digest
from .logging_utils import get_logger
from .matching import resolve_status
from .models import (
    LookupClient,
    LookupResult,
    ResultDecorator,
    Status,
    ValidationContext,
    ValidationError,
)
from .policy import UNKNOWN_ERROR, Deadline, Decision, PolicyEngine


class PwnedPasswordsValidator:
    """Checks passwords against the breach corpus using k-anonymity.

    Only the first five hex characters of the password's SHA-1 leave the
    process. Network and API failures never raise; they are reported as
    errors or ignored depending on ``config.fail_on_error``.

    One instance can be shared between threads.
    """

    def __init__(
        self,
        config: ValidatorConfig,
        *,
        lookup_client: LookupClient | None = None,
        decorator: ResultDecorator | None = None,
        logger: logging.Logger | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        ensure_digest_available()
        self._config = config
        self._logger = logger or get_logger("validator")
        self._owned_client: RangeLookupClient | None = None
        if lookup_client is None:
            self._owned_client = RangeLookupClient.from_config(config, logger=self._logger)
            lookup_client = self._owned_client
        self._client: LookupClient = lookup_client
        self._decorator: ResultDecorator = decorator or identity_decorator
        self._policy = PolicyEngine(config, logger=self._logger, sleep=sleep)

    @property
    def config(self) -> ValidatorConfig:
        return self._config

    def get_api_url(self, password: str) -> str:
        prefix, _ = split_digest(sha1_hex(password))
        return self._client.get_api_url(prefix)

    def check(self, password: str, *, deadline: Deadline | None = None) -> Decision:
        """Return the full decision, with decorated errors, for ``password``."""
        prefix, suffix = split_digest(sha1_hex(password))

        def attempt(timeout: float | None) -> LookupResult:
            result = self._client.lookup(prefix, timeout)
            return replace(result, status=resolve_status(result, suffix))

        try:
            decision = self._policy.evaluate(attempt, deadline)
        except Exception:
            self._logger.exception("Lookup client failed for prefix %s", prefix)
            errors = (ValidationError(UNKNOWN_ERROR),) if self._config.fail_on_error else ()
            decision = Decision(Status.UNKNOWN_API_ERROR, errors, attempts=1)

        if decision.status is Status.PASSWORD_PWNED:
            self._logger.info("Password hash with prefix %s found in breach corpus", prefix)

        context = ValidationContext(
            status=decision.status, attempts=decision.attempts, hash_prefix=prefix
        )
        errors = tuple(self._decorator.decorate(error, context) for error in decision.errors)
        return replace(decision, errors=errors)

    def validate(self, password: str, *, deadline: Deadline | None = None) -> list[ValidationError]:
        """Return the errors to report for ``password``; empty means valid."""
        return list(self.check(password, deadline=deadline).errors)

    def close(self) -> None:
        if self._owned_client is not None:
            self._owned_client.close()

    def __enter__(self) -> PwnedPasswordsValidator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
