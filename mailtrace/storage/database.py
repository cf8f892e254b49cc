"""Database schema and repository implementation."""

import json
import math
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from loguru import logger

from ..models.email_record import EmailRecord, EmailStatus
from ..models.hop import Hop
from ..models.parsed_email import AuthenticationResult, ParsedEmail
from ..utils.date_utils import parse_header_date


class StorageError(Exception):
    """Base exception for storage errors."""

    pass


class DuplicateEmailError(StorageError):
    """Raised when an email with the same id is already stored."""

    pass


class EmailNotFoundError(StorageError):
    """Raised when no email exists for the given id."""

    pass


@dataclass
class EmailPage:
    """One page of stored emails, newest first."""

    emails: list[EmailRecord]
    total: int
    page: int
    total_pages: int


class DatabaseConnection:
    """Database connection and schema management."""

    SCHEMA_VERSION = "1.0"

    def __init__(self, db_path: Path):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """
        Establish database connection.

        Returns:
            SQLite connection object
        """
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row

        return self._conn

    def execute_schema(self) -> None:
        """Create database tables if they don't exist."""
        conn = self.connect()

        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS emails (
                email_id TEXT NOT NULL PRIMARY KEY,
                subject TEXT NOT NULL,
                sender TEXT NOT NULL,
                message_id TEXT NOT NULL DEFAULT '',
                delivered_to TEXT NOT NULL DEFAULT '',
                return_path TEXT NOT NULL DEFAULT '',
                received_chain TEXT NOT NULL,
                delivery_timeline TEXT NOT NULL,
                authentication_results TEXT NOT NULL,
                esp_type TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'pending',
                timestamp TEXT NOT NULL,
                raw_email TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """
        )

        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_email_timestamp
            ON emails(timestamp)
        """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_email_status
            ON emails(status)
        """
        )

        conn.commit()

    def migrate(self) -> None:
        """Run database migrations if needed."""
        self.execute_schema()

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None


class EmailRepository:
    """Repository for EmailRecord entities, keyed by email_id."""

    UPDATABLE_FIELDS = ("subject", "esp_type", "status")

    def __init__(self, db: DatabaseConnection):
        """
        Initialize repository.

        Args:
            db: Database connection
        """
        self.db = db

    def create(self, record: EmailRecord) -> EmailRecord:
        """
        Insert a new email.

        Args:
            record: EmailRecord instance

        Returns:
            The record with created_at/updated_at set

        Raises:
            DuplicateEmailError: If email_id is already stored
        """
        conn = self.db.connect()
        now = datetime.now(timezone.utc)
        parsed = record.parsed

        try:
            conn.execute(
                """
                INSERT INTO emails
                (email_id, subject, sender, message_id, delivered_to, return_path,
                 received_chain, delivery_timeline, authentication_results, esp_type,
                 status, timestamp, raw_email, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    record.email_id,
                    parsed.subject,
                    parsed.sender,
                    parsed.message_id,
                    parsed.delivered_to,
                    parsed.return_path,
                    json.dumps(list(parsed.trace_chain), ensure_ascii=False),
                    json.dumps(
                        [self._hop_to_json(hop) for hop in parsed.timeline], ensure_ascii=False
                    ),
                    json.dumps(parsed.auth_results.to_dict()),
                    parsed.esp_type,
                    record.status.value,
                    record.timestamp.isoformat(),
                    record.raw_email,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        except sqlite3.IntegrityError as e:
            raise DuplicateEmailError(f"Email with ID {record.email_id} already exists") from e

        conn.commit()
        logger.info(f"Email created: {record.email_id}")

        record.created_at = now
        record.updated_at = now
        return record

    def exists(self, email_id: str) -> bool:
        """Check whether an email id is stored."""
        conn = self.db.connect()
        cursor = conn.execute("SELECT 1 FROM emails WHERE email_id = ?", (email_id,))
        return cursor.fetchone() is not None

    def get(self, email_id: str) -> EmailRecord:
        """
        Find email by id.

        Raises:
            EmailNotFoundError: If no email has this id
        """
        conn = self.db.connect()

        cursor = conn.execute("SELECT * FROM emails WHERE email_id = ?", (email_id,))
        row = cursor.fetchone()

        if row is None:
            raise EmailNotFoundError(f"Email with ID {email_id} not found")

        return self._row_to_record(row)

    def find_all(self, page: int = 1, limit: int = 50) -> EmailPage:
        """
        Page through stored emails, newest timestamp first.

        Args:
            page: 1-based page number
            limit: Page size
        """
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        conn = self.db.connect()
        total = conn.execute("SELECT COUNT(*) FROM emails").fetchone()[0]

        cursor = conn.execute(
            "SELECT * FROM emails ORDER BY timestamp DESC LIMIT ? OFFSET ?",
            (limit, (page - 1) * limit),
        )
        emails = [self._row_to_record(row) for row in cursor.fetchall()]

        return EmailPage(
            emails=emails,
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        )

    def update_status(self, email_id: str, status: EmailStatus) -> EmailRecord:
        """Set the review status of an email."""
        record = self.update(email_id, status=status)
        logger.info(f"Email status updated: {email_id} -> {record.status.value}")
        return record

    def update(self, email_id: str, **fields) -> EmailRecord:
        """
        Update subject, esp_type and/or status of an email.

        Raises:
            ValueError: If a field is not updatable
            EmailNotFoundError: If no email has this id
        """
        unknown = set(fields) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        if "status" in fields:
            fields["status"] = EmailStatus(fields["status"]).value

        conn = self.db.connect()
        assignments = ", ".join(f"{name} = ?" for name in fields)
        values = list(fields.values())

        cursor = conn.execute(
            f"UPDATE emails SET {assignments}{', ' if assignments else ''}updated_at = ? "
            "WHERE email_id = ?",
            (*values, datetime.now(timezone.utc).isoformat(), email_id),
        )
        conn.commit()

        if cursor.rowcount == 0:
            raise EmailNotFoundError(f"Email with ID {email_id} not found")

        logger.info(f"Email updated: {email_id}")
        return self.get(email_id)

    def delete(self, email_id: str) -> None:
        """
        Delete an email.

        Raises:
            EmailNotFoundError: If no email has this id
        """
        conn = self.db.connect()
        cursor = conn.execute("DELETE FROM emails WHERE email_id = ?", (email_id,))
        conn.commit()

        if cursor.rowcount == 0:
            raise EmailNotFoundError(f"Email with ID {email_id} not found")

        logger.info(f"Email deleted: {email_id}")

    def stats(self, now: Optional[datetime] = None) -> dict:
        """
        Processing statistics.

        Returns:
            Dictionary with total, pending, done and recent_count (last 24h)
        """
        now = now or datetime.now(timezone.utc)
        since = (now - timedelta(hours=24)).isoformat()
        conn = self.db.connect()

        row = conn.execute(
            """
            SELECT
                COUNT(*) AS total,
                COALESCE(SUM(status = 'pending'), 0) AS pending,
                COALESCE(SUM(status = 'done'), 0) AS done,
                COALESCE(SUM(timestamp >= ?), 0) AS recent_count
            FROM emails
        """,
            (since,),
        ).fetchone()

        return {
            "total": row["total"],
            "pending": row["pending"],
            "done": row["done"],
            "recent_count": row["recent_count"],
        }

    @staticmethod
    def _hop_to_json(hop: Hop) -> dict:
        data = hop.to_dict()
        data["timestampEstimated"] = hop.timestamp_estimated
        return data

    @staticmethod
    def _json_to_hop(data: dict) -> Hop:
        return Hop(
            index=data["hop"],
            sending_host=data.get("from", ""),
            receiving_host=data.get("to", ""),
            protocol=data.get("protocol", "SMTP"),
            timestamp=parse_header_date(data["timeReceived"]),
            delay=data.get("delay"),
            annotation=data.get("additionalInfo", ""),
            timestamp_estimated=data.get("timestampEstimated", False),
        )

    def _row_to_record(self, row: sqlite3.Row) -> EmailRecord:
        """Convert database row to EmailRecord."""
        parsed = ParsedEmail(
            subject=row["subject"],
            sender=row["sender"],
            message_id=row["message_id"],
            delivered_to=row["delivered_to"],
            return_path=row["return_path"],
            trace_chain=tuple(json.loads(row["received_chain"])),
            timeline=tuple(self._json_to_hop(item) for item in json.loads(row["delivery_timeline"])),
            auth_results=AuthenticationResult(**json.loads(row["authentication_results"])),
            esp_type=row["esp_type"],
        )

        return EmailRecord(
            email_id=row["email_id"],
            parsed=parsed,
            raw_email=row["raw_email"],
            status=EmailStatus(row["status"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
