"""Data models for delivery tracing"""

from .email_record import EmailRecord, EmailStatus
from .hop import Hop
from .parsed_email import AuthenticationResult, ParsedEmail

__all__ = [
    "AuthenticationResult",
    "EmailRecord",
    "EmailStatus",
    "Hop",
    "ParsedEmail",
]
