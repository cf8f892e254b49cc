"""mbox mail source."""

import mailbox
from pathlib import Path
from typing import Iterator, Tuple

from mailtrace.services.email_parser.base import EmailParseError, InvalidFormatError
from .base import MailSource, decode_raw


class MboxSource(MailSource):
    """Read messages from an mbox file."""

    format_name = "mbox"

    def iter_messages(self, path: Path) -> Iterator[Tuple[str, str]]:
        """
        Yield (identifier, raw_text) for each message in the mbox.

        Identifiers are "<file name>:<key>", key being the message's
        position in the file.
        """
        if not path.exists():
            raise FileNotFoundError(f"Email file not found: {path}")

        try:
            mbox = mailbox.mbox(str(path), create=False)
        except mailbox.NoSuchMailboxError as e:
            raise InvalidFormatError(f"Not a valid mbox file: {path}") from e

        try:
            for key in mbox.keys():
                yield f"{path.name}:{key}", decode_raw(mbox.get_bytes(key))
        except (OSError, mailbox.Error) as e:
            raise EmailParseError(f"Error reading mbox file {path}: {e}") from e
        finally:
            mbox.close()

    def detect_format(self, path: Path) -> str:
        """'mbox' if path is a file starting with a 'From ' separator line."""
        if not path.is_file():
            return "unknown"

        with open(path, "rb") as f:
            head = f.read(5)

        return self.format_name if head == b"From " else "unknown"
