"""
Timestamp utilities (stdlib-only).

Every timestamp table-spine writes (catalog rows, record system columns,
date/timestamp column values) uses one canonical, lexically sortable text
encoding so ``ORDER BY created_at`` works on the stored strings.

    - **utc_now():** timezone-aware UTC datetime
    - **utc_now_iso():** ``YYYY-MM-DDTHH:MM:SS.ffffffZ``
    - **canonical_date() / canonical_timestamp():** normalise user input

Tags:
    timestamps, utc, iso8601, table-spine, stdlib-only
"""

from __future__ import annotations

from datetime import UTC, date, datetime

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def utc_now_iso() -> str:
    """Current UTC time in the canonical stored encoding."""
    return utc_now().strftime(TIMESTAMP_FORMAT)


def canonical_date(value: str) -> str:
    """Normalise an ISO-8601 calendar date to ``YYYY-MM-DD``.

    Raises ``ValueError`` for anything that is not a calendar date.
    """
    return date.fromisoformat(value).isoformat()


def canonical_timestamp(value: str) -> str:
    """Normalise an ISO-8601 timestamp.

    Naive timestamps keep their wall-clock form; aware ones are converted to
    UTC and rendered with a ``Z`` suffix, so ``2024-05-01T12:00:00+02:00``
    becomes ``2024-05-01T10:00:00Z``.

    Raises ``ValueError`` for unparseable input.
    """
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.isoformat()
    return parsed.astimezone(UTC).replace(tzinfo=None).isoformat() + "Z"
