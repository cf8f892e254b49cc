"""Abstract interface for local mail sources."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Tuple


def decode_raw(data: bytes) -> str:
    """Decode raw message bytes; undecodable bytes become U+FFFD."""
    return data.decode("utf-8", errors="replace")


class MailSource(ABC):
    """
    Abstract interface for anything that supplies raw message text.

    Implementations stand in for the mail-provider client: they hand the
    processor a stable identifier plus the raw RFC 5322 text and own any
    format-specific reading.
    """

    format_name = "unknown"

    @abstractmethod
    def iter_messages(self, path: Path) -> Iterator[Tuple[str, str]]:
        """
        Yield (identifier, raw_text) pairs from the given path.

        Raises:
            FileNotFoundError: If path does not exist
            EmailParseError: If the source is invalid or corrupted

        Notes:
            - Identifiers are stable across runs for an unchanged source
        """
        pass

    @abstractmethod
    def detect_format(self, path: Path) -> str:
        """
        Return this source's format name if it can read path, else 'unknown'.
        """
        pass
