"""SPF/DKIM/DMARC verdict extraction."""

import re
from typing import Mapping, Optional

from mailtrace.models.parsed_email import AuthenticationResult


VERDICT_PATTERNS = {
    "spf": re.compile(r"\bspf=([^;\s]+)", re.IGNORECASE),
    "dkim": re.compile(r"\bdkim=([^;\s]+)", re.IGNORECASE),
    "dmarc": re.compile(r"\bdmarc=([^;\s]+)", re.IGNORECASE),
}


def _find_verdict(mechanism: str, header_value: str) -> Optional[str]:
    if not header_value:
        return None
    match = VERDICT_PATTERNS[mechanism].search(header_value)
    return match.group(1) if match else None


def extract_authentication_results(headers: Mapping[str, str]) -> AuthenticationResult:
    """
    Extract authentication verdicts from a header map.

    Args:
        headers: Lower-cased header name -> value

    Returns:
        AuthenticationResult; Authentication-Results wins per field and
        ARC-Authentication-Results only fills fields left empty
    """
    primary = headers.get("authentication-results", "")
    arc = headers.get("arc-authentication-results", "")

    verdicts = {
        mechanism: _find_verdict(mechanism, primary) or _find_verdict(mechanism, arc)
        for mechanism in VERDICT_PATTERNS
    }
    return AuthenticationResult(**verdicts)
