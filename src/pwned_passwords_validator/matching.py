"""Range response parsing and suffix matching."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .models import LookupResult, Status


@dataclass(frozen=True)
class RangeEntry:
    """One ``SUFFIX:COUNT`` line of a range response."""

    suffix: str
    count: int


def _parse_count(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        return 0


def iter_range_entries(body: str) -> Iterator[RangeEntry]:
    """Yield entries for every line that carries a colon."""
    for line in body.splitlines():
        candidate, separator, count = line.partition(":")
        if not separator:
            continue
        yield RangeEntry(suffix=candidate, count=_parse_count(count))


def find_range_entry(body: str, suffix: str) -> RangeEntry | None:
    """Return the first entry whose suffix equals ``suffix`` exactly."""
    for entry in iter_range_entries(body):
        if entry.suffix == suffix:
            return entry
    return None


def matches(body: str, suffix: str) -> bool:
    return find_range_entry(body, suffix) is not None


def resolve_status(result: LookupResult, suffix: str) -> Status:
    """Confirm or downgrade a provisional PASSWORD_PWNED using the range body."""
    if result.status is not Status.PASSWORD_PWNED:
        return result.status
    if result.body and matches(result.body, suffix):
        return Status.PASSWORD_PWNED
    return Status.PASSWORD_OK
