"""Custom exceptions for the pwned-passwords validator."""


class PwnedValidatorError(Exception):
    """Base exception for this project."""


class ConfigError(PwnedValidatorError):
    """Raised when validator configuration is invalid."""


class DigestUnavailableError(PwnedValidatorError):
    """Raised when the runtime cannot compute SHA-1 digests."""
