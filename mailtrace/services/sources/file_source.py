"""Single-message file source (.eml or plain header dumps)."""

from pathlib import Path
from typing import Iterator, Tuple

from .base import MailSource, decode_raw


class EmlFileSource(MailSource):
    """Read one raw message from a file; the file name is the identifier."""

    format_name = "eml"

    def iter_messages(self, path: Path) -> Iterator[Tuple[str, str]]:
        if not path.is_file():
            raise FileNotFoundError(f"Email file not found: {path}")

        yield path.name, decode_raw(path.read_bytes())

    def detect_format(self, path: Path) -> str:
        return self.format_name if path.is_file() else "unknown"
