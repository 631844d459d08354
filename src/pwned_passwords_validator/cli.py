"""CLI entrypoint for pwned-check."""

from __future__ import annotations

import argparse
import getpass
import os
import sys
from collections.abc import Sequence

from .config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RETRY_DELAY,
    ProxyDescriptor,
    RateLimitExceededBehavior,
    ValidatorConfig,
    parse_rate_limit_behavior,
)
from .errors import ConfigError, DigestUnavailableError
from .logging_utils import configure_logging, get_logger
from .policy import Deadline
from .validator import PwnedPasswordsValidator


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Check whether a password appears in the Pwned Passwords breach corpus."
    )
    parser.add_argument("--api-key", help="hibp-api-key (or set HIBP_API_KEY env var).")
    parser.add_argument(
        "--fail-open",
        action="store_true",
        help="Accept the password when the API cannot be reached or rejects the key.",
    )
    parser.add_argument(
        "--rate-limit",
        choices=[item.value for item in RateLimitExceededBehavior],
        default=RateLimitExceededBehavior.FAIL.value,
        help="Behavior when the API answers 429 Too Many Requests.",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=DEFAULT_MAX_RETRIES,
        help="Retries after 429 when --rate-limit=retry.",
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        default=DEFAULT_RETRY_DELAY,
        help="Seconds to wait before each retry.",
    )
    parser.add_argument(
        "--proxy", help="Proxy URL, e.g. http://proxy:3128, socks://host:1080 or direct."
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_REQUEST_TIMEOUT,
        help="Per-request timeout in seconds.",
    )
    parser.add_argument("--deadline", type=float, help="Overall time limit in seconds.")
    parser.add_argument(
        "--stdin", action="store_true", help="Read the password from the first line of stdin."
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def namespace_to_config(args: argparse.Namespace) -> ValidatorConfig:
    """Convert CLI args to validated ValidatorConfig."""
    return ValidatorConfig(
        api_key=args.api_key or os.getenv("HIBP_API_KEY"),
        fail_on_error=not args.fail_open,
        rate_limit_behavior=parse_rate_limit_behavior(args.rate_limit),
        proxy=ProxyDescriptor.parse(args.proxy) if args.proxy else None,
        request_timeout=args.timeout,
        retry_delay=args.retry_delay,
        max_retries=args.max_retries,
    )


def read_password(args: argparse.Namespace) -> str:
    if args.stdin:
        return sys.stdin.readline().rstrip("\r\n")
    return getpass.getpass("Password: ")


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    args = parse_args(argv)
    configure_logging(args.verbose)
    logger = get_logger("cli")
    try:
        config = namespace_to_config(args)
        validator = PwnedPasswordsValidator(config, logger=logger)
    except (ConfigError, DigestUnavailableError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    password = read_password(args)
    deadline = Deadline.after(args.deadline) if args.deadline else None
    with validator:
        errors = validator.validate(password, deadline=deadline)
    if not errors:
        print("ok")
        return 0
    for error in errors:
        code = error.variables.get("code")
        print(error.key if code is None else f"{error.key} (code {code})")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
