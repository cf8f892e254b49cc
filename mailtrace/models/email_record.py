"""Stored email record data model."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .parsed_email import ParsedEmail


class EmailStatus(Enum):
    """Review status of a stored email."""

    PENDING = "pending"
    DONE = "done"


@dataclass
class EmailRecord:
    """
    Represents a parsed email as persisted by the storage layer.

    Attributes:
        email_id: Stable external message identifier (unique)
        parsed: Parsing result
        raw_email: Original raw message text
        status: Review status
        timestamp: When the message was processed
        created_at: Row creation time (set by storage)
        updated_at: Last modification time (set by storage)
    """

    email_id: str
    parsed: ParsedEmail
    raw_email: str
    timestamp: datetime
    status: EmailStatus = EmailStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate fields after initialization."""
        if not self.email_id:
            raise ValueError("email_id is required")
        if isinstance(self.status, str):
            self.status = EmailStatus(self.status)

    def to_dict(self) -> dict:
        """Serialize including identity and status fields."""
        data = {"emailId": self.email_id, "status": self.status.value}
        data.update(self.parsed.to_dict())
        data["timestamp"] = self.timestamp.isoformat()
        return data
