"""
Parse one Received/X-Received header value into a Hop.

Real-world trace headers are free text written by many different MTAs, so
parsing is a cascade: structured matchers are tried in a fixed order and
the first hit wins. Field-by-field extractors then fill whatever the
matched pattern left blank, or recover everything when nothing matched.
"""

import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from mailtrace.models.hop import Hop
from mailtrace.utils.date_utils import parse_header_date, utc_now
from mailtrace.utils.unicode_utils import strip_brackets


DEFAULT_PROTOCOL = "SMTP"
GMAIL_ANNOTATION = "Originated at Gmail"
GMAIL_HOST_MARKERS = ("google.com", "gmail.com", "mx.google.com")
NO_HOST_TOKENS = ("unknown", "-")

# One host token plus optional comments such as "(Postfix)"; never several
# bare tokens, so matching stays linear in the header length.
_HOST = r"[^\s;()]+(?:\s+\([^()]*\))*"
_BARE_HOST = r"[^\s;()]+"

BY_ONLY_PATTERN = re.compile(
    rf"^by\s+({_HOST})\s+with\s+(\S+)\s+id\s+([^;]+);\s*(.+)", re.IGNORECASE
)
FROM_BY_FOR_PATTERN = re.compile(
    rf"^from\s+({_BARE_HOST})\s+\(([^)]+)\)\s+by\s+({_HOST})\s+with\s+(\S+)"
    rf"\s+id\s+(\S+)\s+for\s+([^;]+);\s*(.+)",
    re.IGNORECASE,
)
BY_ONLY_UNTERMINATED_PATTERN = re.compile(
    rf"^by\s+({_HOST})\s+with\s+(\S+)\s+id\s+(\S+?)[,]?"
    r"\s+((?:[A-Za-z]{3},?\s+)?\d{1,2}\s+[A-Za-z]{3}\s+\d{4}\s+\d{1,2}:\d{2}:\d{2}.*)$",
    re.IGNORECASE,
)
STANDARD_PATTERN = re.compile(
    rf"^from\s+({_HOST})\s+by\s+({_HOST})\s+with\s+([^\s;]+);\s*(.+)", re.IGNORECASE
)

_TOKENS = r"[^\s;()]+(?:\s+[^\s;()]+)*?"

FROM_CLAUSE_PATTERN = re.compile(
    rf"\bfrom\s+({_TOKENS})(?=\s+(?:by|to|with|via)\b|\s*[(;]|\s*$)", re.IGNORECASE
)
RECEIVER_CLAUSE_PATTERNS = (
    re.compile(rf"\bby\s+({_TOKENS})(?=\s+(?:with|via|using|for|id)\b|\s*[(;]|\s*$)", re.IGNORECASE),
    re.compile(rf"\bto\s+({_TOKENS})(?=\s+(?:with|via|for)\b|\s*[(;]|\s*$)", re.IGNORECASE),
)
PROTOCOL_PATTERNS = (
    re.compile(r"\bwith\s+([^\s;]+)", re.IGNORECASE),
    re.compile(r"\bvia\s+([^\s;]+)", re.IGNORECASE),
    re.compile(r"\busing\s+([^\s;]+)", re.IGNORECASE),
)
TIMESTAMP_PATTERNS = (
    # Mon, 1 Jan 2024 10:00:00 +0000
    re.compile(r"[A-Za-z]{3},\s+\d{1,2}\s+[A-Za-z]{3}\s+\d{4}\s+\d{1,2}:\d{2}:\d{2}\s+[+-]\d{4}"),
    # Mon Jan 1 10:00:00 2024
    re.compile(r"[A-Za-z]{3}\s+[A-Za-z]{3}\s+\d{1,2}\s+\d{1,2}:\d{2}:\d{2}\s+\d{4}"),
    # 1 Jan 2024 10:00:00 +0000
    re.compile(r"\d{1,2}\s+[A-Za-z]{3}\s+\d{4}\s+\d{1,2}:\d{2}:\d{2}\s+[+-]\d{4}"),
    # Jan 1 10:00:00 2024
    re.compile(r"[A-Za-z]{3}\s+\d{1,2}\s+\d{1,2}:\d{2}:\d{2}\s+\d{4}"),
)
COMMENT_PATTERN = re.compile(r"\(([^)]+)\)")
FOR_CLAUSE_PATTERN = re.compile(r"\bfor\s+[^;]+", re.IGNORECASE)
ID_CLAUSE_PATTERN = re.compile(r"\bid\s+[^;]+", re.IGNORECASE)


@dataclass(frozen=True)
class ReceivedFields:
    """Raw fields recovered from one trace header before normalization."""

    sending_host: str = ""
    receiving_host: str = ""
    protocol: str = ""
    timestamp: Optional[datetime] = None
    annotation: str = ""


ReceivedMatcher = Callable[[str], Optional[ReceivedFields]]


def _match_by_only(value: str) -> Optional[ReceivedFields]:
    """by <host> with <protocol> id <id>; <timestamp>"""
    match = BY_ONLY_PATTERN.match(value)
    if not match:
        return None
    host, protocol, message_id, when = match.groups()
    return ReceivedFields(
        receiving_host=host.strip(),
        protocol=protocol.upper(),
        timestamp=parse_header_date(when),
        annotation=f"id {message_id.strip()}",
    )


def _match_from_by_for(value: str) -> Optional[ReceivedFields]:
    """from <host> (<detail>) by <host> with <protocol> id <id> for <rcpt>; <timestamp>"""
    match = FROM_BY_FOR_PATTERN.match(value)
    if not match:
        return None
    sender, detail, receiver, protocol, _message_id, recipient, when = match.groups()
    return ReceivedFields(
        sending_host=sender.strip(),
        receiving_host=receiver.strip(),
        protocol=protocol.upper(),
        timestamp=parse_header_date(when),
        annotation=f"{detail.strip()}; for {recipient.strip()}",
    )


def _match_by_only_unterminated(value: str) -> Optional[ReceivedFields]:
    """X-Received variant of the by-only form without ';' before the timestamp."""
    match = BY_ONLY_UNTERMINATED_PATTERN.match(value)
    if not match:
        return None
    host, protocol, message_id, when = match.groups()
    return ReceivedFields(
        receiving_host=host.strip(),
        protocol=protocol.upper(),
        timestamp=parse_header_date(when),
        annotation=f"id {message_id.strip()}",
    )


def _match_standard(value: str) -> Optional[ReceivedFields]:
    """from <host> by <host> with <protocol>; <timestamp>"""
    match = STANDARD_PATTERN.match(value)
    if not match:
        return None
    sender, receiver, protocol, when = match.groups()
    return ReceivedFields(
        sending_host=sender.strip(),
        receiving_host=receiver.strip(),
        protocol=protocol.upper(),
        timestamp=parse_header_date(when),
    )


RECEIVED_MATCHERS: tuple[ReceivedMatcher, ...] = (
    _match_by_only,
    _match_from_by_for,
    _match_by_only_unterminated,
    _match_standard,
)


def strip_comments(value: str) -> str:
    """Remove balanced parenthesized comments; unmatched parentheses are kept."""
    kept: list[str] = []
    opened: list[int] = []
    for ch in value:
        if ch == "(":
            opened.append(len(kept))
            kept.append(ch)
        elif ch == ")" and opened:
            del kept[opened.pop():]
            kept.append(" ")
        else:
            kept.append(ch)
    return " ".join("".join(kept).split())


def _first_group(patterns, text: str) -> str:
    for pattern in patterns:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return ""


def find_timestamp(value: str) -> Optional[datetime]:
    """Search free text for the first parseable timestamp in a known shape."""
    for pattern in TIMESTAMP_PATTERNS:
        for match in pattern.finditer(value):
            parsed = parse_header_date(match.group(0))
            if parsed is not None:
                return parsed
    return None


def find_annotation(value: str) -> str:
    """First parenthesized comment, else the 'for ...' clause, else the 'id ...' clause."""
    # nothing after the last ")" can close a comment
    comment = COMMENT_PATTERN.search(value, 0, value.rfind(")") + 1)
    if comment:
        return comment.group(1).strip()
    for pattern in (FOR_CLAUSE_PATTERN, ID_CLAUSE_PATTERN):
        match = pattern.search(value)
        if match:
            return match.group(0).strip()
    return ""


def extract_fields(value: str) -> ReceivedFields:
    """
    Best-effort field-by-field extraction.

    Each field is searched independently; a miss leaves it empty.
    Host and protocol clauses are searched with comments removed so that
    text like "(using TLSv1.3 with cipher ...)" is not mistaken for them.
    """
    bare = strip_comments(value)
    return ReceivedFields(
        sending_host=_first_group((FROM_CLAUSE_PATTERN,), bare),
        receiving_host=_first_group(RECEIVER_CLAUSE_PATTERNS, bare),
        protocol=_first_group(PROTOCOL_PATTERNS, bare).upper(),
        timestamp=find_timestamp(value),
        annotation=find_annotation(value),
    )


def fill_blanks(fields: ReceivedFields, fallback: ReceivedFields) -> ReceivedFields:
    """Copy fallback values into fields that are still empty."""
    missing = {
        name: getattr(fallback, name)
        for name in ("sending_host", "receiving_host", "protocol", "timestamp", "annotation")
        if not getattr(fields, name) and getattr(fallback, name)
    }
    return replace(fields, **missing) if missing else fields


def normalize_host(host: str) -> str:
    """
    Drop comments, strip brackets and map placeholder tokens to "".

    Examples:
        >>> normalize_host("[192.0.2.1]")
        '192.0.2.1'
        >>> normalize_host("mx.example.org (Postfix)")
        'mx.example.org'
        >>> normalize_host("unknown")
        ''
    """
    host = strip_brackets(strip_comments(host))
    if host.lower() in NO_HOST_TOKENS:
        return ""
    return host


def is_gmail_host(host: str) -> bool:
    lowered = host.lower()
    return any(marker in lowered for marker in GMAIL_HOST_MARKERS)


def annotate_gmail(hop: Hop) -> Hop:
    """Label Google-received hops that carry no more specific annotation."""
    if is_gmail_host(hop.receiving_host) and hop.annotation in ("", "Google Server"):
        return replace(hop, annotation=GMAIL_ANNOTATION)
    return hop


def match_received(value: str) -> tuple[Optional[str], ReceivedFields]:
    """
    Run the matcher cascade, then fill blanks from the fallback extractors.

    Returns:
        (name of the matcher that hit or None, recovered fields)
    """
    for matcher in RECEIVED_MATCHERS:
        fields = matcher(value)
        if fields is not None:
            return matcher.__name__.lstrip("_"), fill_blanks(fields, extract_fields(value))
    return None, extract_fields(value)


def parse_received_header(value: str, index: int = 0, now: Optional[datetime] = None) -> Hop:
    """
    Parse one trace-header value into a Hop. Never raises, never returns None.

    Args:
        value: Unfolded Received/X-Received value (without the header name)
        index: Chronological position to assign
        now: Substitute timestamp when none can be parsed (default: current time)

    Returns:
        Hop with best-effort fields; unknown hosts are "", protocol defaults
        to "SMTP" and a missing timestamp becomes `now` with
        timestamp_estimated=True
    """
    text = " ".join((value or "").split())
    matcher_name, fields = match_received(text)

    estimated = fields.timestamp is None
    if estimated:
        logger.warning(f"No timestamp in trace header, using current time: {text!r}")

    hop = Hop(
        index=index,
        sending_host=normalize_host(fields.sending_host),
        receiving_host=normalize_host(fields.receiving_host),
        protocol=fields.protocol or DEFAULT_PROTOCOL,
        timestamp=fields.timestamp if not estimated else (now or utc_now()),
        annotation=fields.annotation,
        timestamp_estimated=estimated,
    )
    hop = annotate_gmail(hop)

    logger.debug(f"Parsed trace header via {matcher_name or 'fallback'}: {hop}")
    return hop
