"""Local mail sources."""

from pathlib import Path

from mailtrace.services.email_parser.base import InvalidFormatError
from .base import MailSource
from .file_source import EmlFileSource
from .maildir_source import MaildirSource
from .mbox_source import MboxSource


def open_source(path: Path) -> MailSource:
    """
    Pick the source able to read path: Maildir, then mbox, then single file.

    Raises:
        FileNotFoundError: If path does not exist
        InvalidFormatError: If path is a directory that is not a Maildir
    """
    if not path.exists():
        raise FileNotFoundError(f"Path not found: {path}")

    for source in (MaildirSource(), MboxSource(), EmlFileSource()):
        if source.detect_format(path) != "unknown":
            return source

    raise InvalidFormatError(f"Unsupported mail source: {path}")


__all__ = ["EmlFileSource", "MailSource", "MaildirSource", "MboxSource", "open_source"]
