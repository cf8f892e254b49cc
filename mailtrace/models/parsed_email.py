"""Parsed email data model."""

from dataclasses import dataclass, field
from typing import Optional

from .hop import Hop


@dataclass(frozen=True)
class AuthenticationResult:
    """
    SPF/DKIM/DMARC verdicts extracted from authentication headers.

    Each field holds a short token such as 'pass', 'fail' or 'neutral',
    or None when the verdict is absent.
    """

    spf: Optional[str] = None
    dkim: Optional[str] = None
    dmarc: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            name: value
            for name, value in (("spf", self.spf), ("dkim", self.dkim), ("dmarc", self.dmarc))
            if value
        }


@dataclass(frozen=True)
class ParsedEmail:
    """
    Structured result of parsing one raw message.

    Attributes:
        subject: Subject header ("No Subject" if absent)
        sender: From header ("Unknown Sender" if absent)
        message_id: Message-ID header ("" if absent)
        delivered_to: Delivered-To header
        return_path: Return-Path header
        trace_chain: Raw Received/X-Received values, newest-first
        timeline: Hops in chronological order
        auth_results: Authentication verdicts
        esp_type: Guessed Email Service Provider label
    """

    subject: str
    sender: str
    message_id: str = ""
    delivered_to: str = ""
    return_path: str = ""
    trace_chain: tuple[str, ...] = ()
    timeline: tuple[Hop, ...] = ()
    auth_results: AuthenticationResult = field(default_factory=AuthenticationResult)
    esp_type: str = "Unknown"

    @property
    def hop_count(self) -> int:
        return len(self.timeline)

    def to_dict(self) -> dict:
        """Serialize to the output contract consumed by storage and display."""
        return {
            "headers": {
                "subject": self.subject,
                "from": self.sender,
                "messageId": self.message_id,
                "deliveredTo": self.delivered_to,
                "returnPath": self.return_path,
            },
            "traceChain": list(self.trace_chain),
            "timeline": [hop.to_dict() for hop in self.timeline],
            "authenticationResults": self.auth_results.to_dict(),
            "espType": self.esp_type,
        }
