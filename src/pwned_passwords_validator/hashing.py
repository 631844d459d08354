"""SHA-1 hashing and k-anonymity prefix/suffix split."""

from __future__ import annotations

import hashlib

from .errors import DigestUnavailableError

HASH_PREFIX_LENGTH = 5
DIGEST_HEX_LENGTH = 40


def ensure_digest_available() -> None:
    """Raise DigestUnavailableError when SHA-1 cannot be used in this runtime."""
    try:
        hashlib.new("sha1", b"", usedforsecurity=False)
    except ValueError as exc:
        raise DigestUnavailableError(f"SHA-1 digest is not available: {exc}") from exc


def sha1_hex(password: str) -> str:
    """Return the uppercase hex SHA-1 of the UTF-8 encoded password."""
    digest = hashlib.new("sha1", password.encode("utf-8"), usedforsecurity=False)
    return digest.hexdigest().upper()


def split_digest(digest: str) -> tuple[str, str]:
    """Split a hex digest into the discoverable prefix and the secret suffix."""
    return digest[:HASH_PREFIX_LENGTH], digest[HASH_PREFIX_LENGTH:]


def hash_prefix(password: str) -> str:
    return split_digest(sha1_hex(password))[0]


def hash_suffix(password: str) -> str:
    return split_digest(sha1_hex(password))[1]
