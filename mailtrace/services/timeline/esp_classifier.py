"""Email Service Provider classification."""

import re
from typing import Sequence


# Checked against Return-Path and the joined trace headers, in order
RELAY_SIGNATURES = (
    (("amazonses.com", "ses"), "Amazon SES"),
    (("sendgrid.net",), "SendGrid"),
    (("mailgun.org",), "Mailgun"),
    (("mandrillapp.com",), "Mandrill"),
)

# Checked against the From header, in order
SENDER_SIGNATURES = (
    (("gmail.com",), "Gmail"),
    (("outlook.com", "hotmail.com"), "Outlook"),
    (("yahoo.com",), "Yahoo"),
    (("amazonaws.com", "ses"), "Amazon SES"),
    (("sendgrid.net",), "SendGrid"),
    (("mailgun.org",), "Mailgun"),
    (("mandrillapp.com",), "Mandrill"),
)

UNKNOWN_ESP = "Unknown"

_FROM_DOMAIN = re.compile(r"@([^>]+)")


def _match_signature(text: str, signatures) -> str | None:
    for markers, label in signatures:
        if any(marker in text for marker in markers):
            return label
    return None


def classify_esp(from_header: str, return_path: str, trace_headers: Sequence[str]) -> str:
    """
    Guess the originating ESP, first match wins.

    Return-Path and From are matched as written, so "GMAIL.COM" is not
    Gmail; the joined trace headers are lower-cased before matching.

    Args:
        from_header: Raw From header value
        return_path: Raw Return-Path header value
        trace_headers: Received/X-Received values

    Returns:
        ESP label, the From domain when no provider is recognized, or
        "Unknown"

    Examples:
        >>> classify_esp("alerts@gmail.com", "bounce@sendgrid.net", [])
        'SendGrid'
        >>> classify_esp("Team <team@example.org>", "", [])
        'example.org'
    """
    return (
        _match_signature(return_path or "", RELAY_SIGNATURES)
        or _match_signature(from_header or "", SENDER_SIGNATURES)
        or _match_signature(" ".join(trace_headers).lower(), RELAY_SIGNATURES)
        or _sender_domain(from_header or "")
        or UNKNOWN_ESP
    )


def _sender_domain(from_header: str) -> str:
    match = _FROM_DOMAIN.search(from_header)
    return match.group(1).strip() if match else ""
