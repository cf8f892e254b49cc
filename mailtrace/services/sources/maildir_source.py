"""Maildir mail source."""

import mailbox
from pathlib import Path
from typing import Iterator, Tuple

from mailtrace.services.email_parser.base import EmailParseError, InvalidFormatError
from .base import MailSource, decode_raw


class MaildirSource(MailSource):
    """Read messages from a Maildir directory."""

    format_name = "maildir"

    def iter_messages(self, path: Path) -> Iterator[Tuple[str, str]]:
        """Yield (maildir key, raw_text) for each message, in sorted key order."""
        if not path.exists():
            raise FileNotFoundError(f"Maildir not found: {path}")

        if self.detect_format(path) != self.format_name:
            raise InvalidFormatError(f"Not a valid Maildir: {path}")

        maildir = mailbox.Maildir(str(path), factory=None, create=False)

        try:
            for key in sorted(maildir.keys()):
                yield key, decode_raw(maildir.get_bytes(key))
        except (OSError, mailbox.Error) as e:
            raise EmailParseError(f"Error reading Maildir {path}: {e}") from e
        finally:
            maildir.close()

    def detect_format(self, path: Path) -> str:
        """'maildir' if path holds cur/, new/ and tmp/ subdirectories."""
        if not path.is_dir():
            return "unknown"

        maildir_subdirs = {"cur", "new", "tmp"}
        present = {p.name for p in path.iterdir() if p.is_dir()}
        return self.format_name if maildir_subdirs.issubset(present) else "unknown"
