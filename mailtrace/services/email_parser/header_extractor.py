"""Split raw message text into unfolded header fields and trace headers."""

from functools import reduce
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from loguru import logger

from .base import TRACE_HEADER_NAMES, ExtractedHeaders, InvalidMessageError


def iter_header_lines(raw_text: str) -> Iterator[str]:
    """
    Yield logical header lines with continuation lines folded in.

    Stops at the first blank line; body lines are never yielded.
    Continuations (leading space or tab) are trimmed and appended to the
    current line with a single space. Only LF and CRLF end a line; other
    Unicode line separators stay inside the header value.
    """
    current = None

    for line in raw_text.split("\n"):
        line = line.rstrip("\r")
        if not line.strip():
            break

        if line[0] in (" ", "\t"):
            if current is not None:
                current = f"{current} {line.strip()}"
            continue

        if current is not None:
            yield current
        current = line

    if current is not None:
        yield current


def split_header_line(line: str) -> tuple[str, str] | None:
    """
    Split 'Name: value' into (lower-cased name, trimmed value).

    Returns None for lines without a usable header name.

    Examples:
        >>> split_header_line("Subject: Hello")
        ('subject', 'Hello')
        >>> split_header_line("no colon here") is None
        True
    """
    name, sep, value = line.partition(":")
    # a name may not start with whitespace such as U+2028
    if name[:1].isspace():
        return None
    name = name.rstrip().lower()

    if not sep or not name or any(ch.isspace() for ch in name):
        return None

    return name, value.strip()


def _merge_field(headers: dict[str, str], item: tuple[str, str]) -> dict[str, str]:
    name, value = item
    previous = headers.get(name)
    return {**headers, name: value if previous is None else f"{previous} {value}"}


def build_header_map(fields: Iterable[tuple[str, str]]) -> Mapping[str, str]:
    """Fold ordered header fields into a read-only name -> value map."""
    return MappingProxyType(reduce(_merge_field, fields, {}))


def extract_headers(raw_text: str) -> ExtractedHeaders:
    """
    Extract the header map and trace-header list from a raw message.

    Args:
        raw_text: Full header-plus-body text

    Returns:
        ExtractedHeaders with header map, ordered fields and trace headers

    Raises:
        InvalidMessageError: If raw_text is not a string

    Notes:
        - Malformed lines (no colon, empty name) are skipped silently
        - Trace headers are kept even when their value is empty
    """
    if not isinstance(raw_text, str):
        raise InvalidMessageError(f"Raw message must be text, got {type(raw_text).__name__}")

    fields = tuple(
        pair for pair in (split_header_line(line) for line in iter_header_lines(raw_text)) if pair
    )
    trace_headers = tuple(value for name, value in fields if name in TRACE_HEADER_NAMES)

    logger.debug(f"Extracted {len(fields)} header fields, {len(trace_headers)} trace headers")

    return ExtractedHeaders(
        headers=build_header_map(fields),
        fields=fields,
        trace_headers=trace_headers,
    )
