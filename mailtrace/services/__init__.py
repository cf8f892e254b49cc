"""Business logic services"""

from .email_parser import extract_authentication_results, extract_headers
from .processing import EmailProcessor, parse_email
from .reporting import TimelineFormatter
from .sources import MailSource, open_source
from .timeline import classify_esp, parse_received_header, reconstruct_timeline

__all__ = [
    "EmailProcessor",
    "MailSource",
    "TimelineFormatter",
    "classify_esp",
    "extract_authentication_results",
    "extract_headers",
    "open_source",
    "parse_email",
    "parse_received_header",
    "reconstruct_timeline",
]
