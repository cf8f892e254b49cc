"""Delivery hop data model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from mailtrace.utils.date_utils import to_iso8601


@dataclass(frozen=True)
class Hop:
    """
    One mail-transfer step reconstructed from a Received header.

    Attributes:
        index: 0-based chronological position (0 = earliest)
        sending_host: Host that handed the message over ("" if unknown)
        receiving_host: Host that accepted the message ("" if unknown)
        protocol: Upper-cased transport protocol, "SMTP" by default
        timestamp: Time the receiving host stamped the message
        delay: Transit delay label such as "5 sec" (filled after ordering)
        annotation: Free-text hint (server detail, id, recipient)
        timestamp_estimated: True when no timestamp could be parsed and
            the current time was substituted
    """

    index: int
    receiving_host: str
    timestamp: datetime
    sending_host: str = ""
    protocol: str = "SMTP"
    delay: Optional[str] = None
    annotation: str = ""
    timestamp_estimated: bool = False

    def to_dict(self) -> dict:
        """Serialize to the timeline entry contract (camelCase keys)."""
        entry = {
            "hop": self.index,
            "to": self.receiving_host,
            "protocol": self.protocol,
            "timeReceived": to_iso8601(self.timestamp),
        }
        if self.delay is not None:
            entry["delay"] = self.delay
        if self.sending_host:
            entry["from"] = self.sending_host
        if self.annotation:
            entry["additionalInfo"] = self.annotation
        return entry
