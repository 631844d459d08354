"""Runtime configuration model."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from .errors import ConfigError
from .validation import parse_bool, validate_proxy_address, validate_runtime_constraints

RANGE_API_URL = "https://api.pwnedpasswords.com/range/{prefix}"
DEFAULT_USER_AGENT = "pwned-passwords-validator/1.0"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RETRY_DELAY = 2.0
DEFAULT_MAX_RETRIES = 3


class RateLimitExceededBehavior(str, Enum):
    """What to do when the API answers 429 Too Many Requests."""

    IGNORE = "ignore"
    RETRY = "retry"
    FAIL = "fail"


class ProxyType(str, Enum):
    DIRECT = "direct"
    HTTP = "http"
    SOCKS = "socks"


_PROXY_SCHEMES = {
    "http": ProxyType.HTTP,
    "https": ProxyType.HTTP,
    "socks": ProxyType.SOCKS,
    "socks5": ProxyType.SOCKS,
    "socks5h": ProxyType.SOCKS,
}


@dataclass(frozen=True)
class ProxyDescriptor:
    """Plain-value description of a proxy endpoint.

    Only the type and socket address are kept so the descriptor can be
    pickled or copied freely; the ``requests`` proxies mapping is built
    when a request is made.
    """

    type: ProxyType
    host: str = ""
    port: int = 0

    def __post_init__(self) -> None:
        try:
            proxy_type = ProxyType(self.type)
        except ValueError as exc:
            raise ConfigError(f"Unknown proxy type {self.type!r}.") from exc
        object.__setattr__(self, "type", proxy_type)
        if proxy_type is not ProxyType.DIRECT:
            validate_proxy_address(self.host, self.port)

    @classmethod
    def direct(cls) -> ProxyDescriptor:
        return cls(ProxyType.DIRECT)

    @classmethod
    def parse(cls, value: str) -> ProxyDescriptor:
        """Build a descriptor from ``direct`` or a ``scheme://host:port`` URL."""
        if value.strip().lower() == ProxyType.DIRECT.value:
            return cls.direct()
        parsed = urlparse(value.strip())
        proxy_type = _PROXY_SCHEMES.get(parsed.scheme.lower())
        if proxy_type is None:
            raise ConfigError(f"Unsupported proxy URL {value!r}; use http:// or socks://.")
        try:
            port = parsed.port
        except ValueError as exc:
            raise ConfigError(f"Invalid proxy port in {value!r}.") from exc
        if port is None:
            raise ConfigError(f"Proxy URL {value!r} must include a port.")
        return cls(proxy_type, parsed.hostname or "", port)

    @property
    def url(self) -> str | None:
        if self.type is ProxyType.DIRECT:
            return None
        # socks5h resolves host names on the proxy side
        scheme = "socks5h" if self.type is ProxyType.SOCKS else "http"
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{scheme}://{host}:{self.port}"

    def to_requests_proxies(self) -> dict[str, str | None]:
        """Return the proxies mapping understood by ``requests``.

        ``DIRECT`` maps every scheme to None, which keeps requests from
        filling them in from HTTP(S)_PROXY and ALL_PROXY.
        """
        url = self.url
        if url is None:
            return {"http": None, "https": None, "all": None}
        return {"http": url, "https": url}


@dataclass(frozen=True)
class ValidatorConfig:
    """Validated configuration shared by every validation call."""

    api_key: str | None
    fail_on_error: bool = True
    rate_limit_behavior: RateLimitExceededBehavior = RateLimitExceededBehavior.FAIL
    proxy: ProxyDescriptor | None = None
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    retry_delay: float = DEFAULT_RETRY_DELAY
    max_retries: int = DEFAULT_MAX_RETRIES
    api_url: str = RANGE_API_URL

    def __post_init__(self) -> None:
        validate_runtime_constraints(
            api_key=self.api_key,
            api_url=self.api_url,
            user_agent=self.user_agent,
            request_timeout=self.request_timeout,
            retry_delay=self.retry_delay,
            max_retries=self.max_retries,
        )

    def __repr__(self) -> str:
        return (
            f"ValidatorConfig(api_key='***', fail_on_error={self.fail_on_error}, "
            f"rate_limit_behavior={self.rate_limit_behavior.value}, proxy={self.proxy!r}, "
            f"max_retries={self.max_retries})"
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> ValidatorConfig:
        """Build a config from HIBP_API_KEY and the PWNED_* environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {"api_key": env.get("HIBP_API_KEY")}
        if "PWNED_FAIL_ON_ERROR" in env:
            values["fail_on_error"] = parse_bool(
                env["PWNED_FAIL_ON_ERROR"], name="PWNED_FAIL_ON_ERROR"
            )
        if "PWNED_RATE_LIMIT_BEHAVIOR" in env:
            values["rate_limit_behavior"] = parse_rate_limit_behavior(
                env["PWNED_RATE_LIMIT_BEHAVIOR"]
            )
        if env.get("PWNED_PROXY"):
            values["proxy"] = ProxyDescriptor.parse(env["PWNED_PROXY"])
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]


def parse_rate_limit_behavior(value: str) -> RateLimitExceededBehavior:
    try:
        return RateLimitExceededBehavior(value.strip().lower())
    except ValueError as exc:
        choices = ", ".join(item.value for item in RateLimitExceededBehavior)
        raise ConfigError(f"Rate limit behavior must be one of {choices}, got {value!r}.") from exc
