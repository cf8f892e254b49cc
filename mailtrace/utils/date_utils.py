"""Date parsing and formatting helpers for header timestamps."""

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

from dateutil import parser as date_parser

# dateutil fills missing fields from today, so it only sees text that
# already carries a four-digit year and a clock time
_YEAR = re.compile(r"\b\d{4}\b")
_CLOCK = re.compile(r"\d{1,2}:\d{2}")


def parse_header_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a header date string into a timezone-aware datetime.

    Args:
        value: Date text (RFC 2822, asctime-like, ISO 8601, or another
            layout dateutil understands such as "2024/01/01 10:00:00 +0000")

    Returns:
        Aware datetime, or None if the text cannot be parsed

    Notes:
        - Naive results (no offset, or "-0000") are interpreted as UTC
        - Trailing comments such as "(UTC)" are tolerated

    Examples:
        >>> parse_header_date("Mon, 1 Jan 2024 10:00:00 +0000").isoformat()
        '2024-01-01T10:00:00+00:00'
        >>> parse_header_date("not a date") is None
        True
    """
    if not value or not value.strip():
        return None

    text = value.strip()

    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError, OverflowError):
        parsed = None

    if parsed is None:
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed = _parse_lenient(text)

    if parsed is None:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed


def _parse_lenient(text: str) -> Optional[datetime]:
    if not (_YEAR.search(text) and _CLOCK.search(text)):
        return None
    try:
        return date_parser.parse(text)
    except (ValueError, OverflowError):
        return None


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso8601(moment: datetime) -> str:
    """
    Format datetime as UTC ISO 8601 with millisecond precision.

    Examples:
        >>> to_iso8601(datetime(2024, 1, 1, 10, 0, 5, tzinfo=timezone.utc))
        '2024-01-01T10:00:05.000Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    text = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")
