"""Validation and runtime guardrails."""

from __future__ import annotations

from urllib.parse import urlparse

from .errors import ConfigError

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def is_supported_url(url: str) -> bool:
    """Allow only absolute HTTP(S) URLs with a hostname."""
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def parse_bool(value: str, *, name: str) -> bool:
    """Parse a boolean environment value and raise ConfigError on garbage."""
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be one of true/false, got {value!r}.")


def validate_proxy_address(host: str, port: int) -> None:
    if not host or not host.strip():
        raise ConfigError("Proxy host must not be empty.")
    if not 0 < port < 65536:
        raise ConfigError(f"Proxy port must be between 1 and 65535, got {port}.")


def validate_runtime_constraints(
    *,
    api_key: str | None,
    api_url: str,
    user_agent: str,
    request_timeout: float,
    retry_delay: float,
    max_retries: int,
) -> None:
    """Validate validator configuration and raise ConfigError on invalid values."""
    if api_key is None:
        raise ConfigError("An hibp-api-key is required. Set HIBP_API_KEY or pass --api-key.")
    if not api_key.strip():
        raise ConfigError("The hibp-api-key must not be blank.")
    if "{prefix}" not in api_url:
        raise ConfigError("api_url must contain a {prefix} placeholder.")
    try:
        sample_url = api_url.format(prefix="00000")
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigError(
            f"api_url may only use the {{prefix}} placeholder, got {api_url!r}."
        ) from exc
    if not is_supported_url(sample_url):
        raise ConfigError(f"api_url must be an absolute http(s) URL, got {api_url!r}.")
    if not user_agent.strip():
        raise ConfigError("user_agent must not be blank; the API rejects anonymous clients.")
    if request_timeout <= 0:
        raise ConfigError("--timeout must be > 0.")
    if retry_delay < 0:
        raise ConfigError("--retry-delay must be >= 0.")
    if max_retries < 0:
        raise ConfigError("--max-retries must be >= 0.")
