"""Logging helpers.

The package logs to ``pwned_passwords_validator`` and ships with a
NullHandler on it, so applications that embed the validator only see
records once they configure logging themselves.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "pwned_passwords_validator"
CLI_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(component: str | None = None) -> logging.Logger:
    """Return the package logger, or a child logger for ``component``."""
    if component:
        return logging.getLogger(f"{LOGGER_NAME}.{component}")
    return logging.getLogger(LOGGER_NAME)


def configure_logging(verbose: bool = False) -> None:
    """Send package records to stderr; used by the pwned-check CLI only."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=CLI_LOG_FORMAT)
    get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)
