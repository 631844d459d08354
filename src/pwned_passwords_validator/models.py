"""Protocols and lightweight model types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Protocol

UNKNOWN_ERROR_CODE = -1


class Status(Enum):
    """Outcome of one exchange with the range API."""

    PASSWORD_OK = "password_ok"
    PASSWORD_PWNED = "password_pwned"
    TOO_MANY_REQUESTS = "too_many_requests"
    UNAUTHORIZED = "unauthorized"
    UNKNOWN_API_ERROR = "unknown_api_error"

    @classmethod
    def from_http_status(cls, code: int) -> Status:
        """Map an HTTP status code to a Status.

        200 is reported as PASSWORD_PWNED until the range body has been
        checked for the password's suffix.
        """
        if code == 200:
            return cls.PASSWORD_PWNED
        if code == 401:
            return cls.UNAUTHORIZED
        if code == 429:
            return cls.TOO_MANY_REQUESTS
        return cls.UNKNOWN_API_ERROR


@dataclass(frozen=True)
class LookupResult:
    """Classified response of a single range lookup."""

    status: Status
    body: str | None = None
    http_status: int | None = None

    @property
    def error_code(self) -> int:
        return self.http_status if self.http_status is not None else UNKNOWN_ERROR_CODE


@dataclass(frozen=True)
class ValidationError:
    """A verdict error surfaced to the form-validation layer."""

    key: str
    variables: dict[str, Any] = field(default_factory=dict)
    message_key: str | None = None

    def with_variable(self, name: str, value: Any) -> ValidationError:
        return replace(self, variables={**self.variables, name: value})


@dataclass(frozen=True)
class ValidationContext:
    """What a decorator may know about a validation; never the password."""

    status: Status
    attempts: int
    hash_prefix: str


class LookupClient(Protocol):
    """Contract for range API clients."""

    def get_api_url(self, prefix: str) -> str:
        """Return the range URL for a hash prefix."""

    def lookup(self, prefix: str, timeout: float | None = None) -> LookupResult:
        """Query the range API for a hash prefix."""


class ResultDecorator(Protocol):
    """Contract for hooks that enrich reported errors."""

    def decorate(self, error: ValidationError, context: ValidationContext) -> ValidationError:
        """Return the error to report in place of ``error``."""
