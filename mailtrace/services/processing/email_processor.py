"""Raw message -> ParsedEmail pipeline, with optional filtering and storage."""

from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from mailtrace.config.app_config import IngestionConfig
from mailtrace.models.email_record import EmailRecord
from mailtrace.models.parsed_email import ParsedEmail
from mailtrace.services.email_parser.auth_results import extract_authentication_results
from mailtrace.services.email_parser.header_extractor import extract_headers
from mailtrace.services.timeline.esp_classifier import classify_esp
from mailtrace.services.timeline.timeline_builder import reconstruct_timeline
from mailtrace.storage.audit_log import AuditLog
from mailtrace.storage.database import EmailRepository
from mailtrace.utils.date_utils import parse_header_date


DEFAULT_SUBJECT = "No Subject"
DEFAULT_SENDER = "Unknown Sender"


def parse_email(raw_text: str, now: Optional[datetime] = None) -> ParsedEmail:
    """
    Parse one raw message into headers, timeline, auth results and ESP.

    Args:
        raw_text: Full header-plus-body message text
        now: Substitute time for unparseable timestamps (default: current time)

    Returns:
        Fully populated ParsedEmail

    Raises:
        InvalidMessageError: If raw_text is not a string

    Notes:
        - Never raises for malformed content; see Hop.timestamp_estimated
          for hops whose time could not be recovered
    """
    extracted = extract_headers(raw_text)

    sender = extracted.get("from", DEFAULT_SENDER)
    return_path = extracted.get("return-path")

    dates = extracted.all("date")
    date_value = next(
        (value for value in dates if parse_header_date(value) is not None),
        dates[0] if dates else None,
    )
    timeline = reconstruct_timeline(extracted.trace_headers, date_value, now=now)

    return ParsedEmail(
        subject=extracted.get("subject", DEFAULT_SUBJECT),
        sender=sender,
        message_id=extracted.get("message-id") or extracted.get("messageid"),
        delivered_to=extracted.get("delivered-to"),
        return_path=return_path,
        trace_chain=extracted.trace_headers,
        timeline=tuple(timeline),
        auth_results=extract_authentication_results(extracted.headers),
        esp_type=classify_esp(sender, return_path, extracted.trace_headers),
    )


class EmailProcessor:
    """
    Parse raw messages and hand accepted ones to storage.

    Which messages are accepted is decided by IngestionConfig, never by
    the parsing core. Messages whose id is already stored are skipped when
    skip_existing is set, so repeated notifications for one message are
    processed once.
    """

    def __init__(
        self,
        repository: Optional[EmailRepository] = None,
        audit_log: Optional[AuditLog] = None,
        ingestion: Optional[IngestionConfig] = None,
    ):
        """
        Initialize processor.

        Args:
            repository: Storage for processed emails (None = parse only)
            audit_log: Optional audit trail
            ingestion: Acceptance filters (default: accept everything)
        """
        self.repository = repository
        self.audit_log = audit_log
        self.ingestion = ingestion or IngestionConfig()

    def parse(self, raw_text: str) -> ParsedEmail:
        """Parse without filtering or storing."""
        return parse_email(raw_text)

    def process(self, raw_text: str, email_id: str) -> Optional[EmailRecord]:
        """
        Parse, filter and store one message.

        Args:
            raw_text: Raw message text
            email_id: Stable external message identifier

        Returns:
            The stored EmailRecord, or None when the message was skipped
            (filtered out or already stored)

        Raises:
            InvalidMessageError: If raw_text is not a string
            DuplicateEmailError: If email_id is stored and skip_existing is off
        """
        if self.repository is not None and self.ingestion.skip_existing:
            if self.repository.exists(email_id):
                logger.info(f"Email {email_id} already processed, skipping")
                self._audit("email_skipped", email_id, {"reason": "already_stored"})
                return None

        parsed = parse_email(raw_text)

        if not self.ingestion.accepts(parsed.subject, parsed.sender):
            logger.info(f"Email {email_id} does not match ingestion filters, skipping")
            self._audit("email_skipped", email_id, {"reason": "filtered"})
            return None

        if self.audit_log is not None:
            self.audit_log.log_email_parsed(
                email_id=email_id,
                hop_count=parsed.hop_count,
                esp_type=parsed.esp_type,
                estimated_hops=sum(1 for hop in parsed.timeline if hop.timestamp_estimated),
            )

        record = EmailRecord(
            email_id=email_id,
            parsed=parsed,
            raw_email=raw_text,
            timestamp=datetime.now(timezone.utc),
        )

        if self.repository is None:
            return record

        record = self.repository.create(record)
        self._audit("email_created", email_id, {"subject": parsed.subject})
        return record

    def _audit(self, event_type: str, email_id: str, metadata: dict) -> None:
        if self.audit_log is not None:
            self.audit_log.log_event(event_type, email_id, metadata)
