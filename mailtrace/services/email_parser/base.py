"""Shared types and exceptions for raw header parsing."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


TRACE_HEADER_NAMES = ("received", "x-received")


class EmailParseError(Exception):
    """Base exception for email parsing errors."""

    pass


class InvalidMessageError(EmailParseError):
    """Raised when the raw message is not text at all."""

    pass


class InvalidFormatError(EmailParseError):
    """Raised when a mail source format is not recognized or supported."""

    pass


@dataclass(frozen=True)
class ExtractedHeaders:
    """
    Header section of one raw message, unfolded.

    Attributes:
        headers: Lower-cased header name -> value; repeated names are
            joined with a single space in encounter order
        fields: Every (name, value) pair in document order
        trace_headers: Received/X-Received values in document order
            (newest-first)
    """

    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    fields: tuple[tuple[str, str], ...] = ()
    trace_headers: tuple[str, ...] = ()

    def get(self, name: str, default: str = "") -> str:
        """Return the joined value of a header, or default when absent/empty."""
        return self.headers.get(name.lower()) or default

    def first(self, name: str) -> Optional[str]:
        """Return the first occurrence of a header, or None."""
        wanted = name.lower()
        for field_name, value in self.fields:
            if field_name == wanted:
                return value
        return None

    def all(self, name: str) -> list[str]:
        """Return every occurrence of a header in document order."""
        wanted = name.lower()
        return [value for field_name, value in self.fields if field_name == wanted]

