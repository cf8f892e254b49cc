"""Raw header parsing services."""

from .auth_results import extract_authentication_results
from .base import EmailParseError, ExtractedHeaders, InvalidFormatError, InvalidMessageError
from .header_extractor import extract_headers

__all__ = [
    "EmailParseError",
    "ExtractedHeaders",
    "InvalidFormatError",
    "InvalidMessageError",
    "extract_authentication_results",
    "extract_headers",
]
