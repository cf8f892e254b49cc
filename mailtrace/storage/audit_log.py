"""Audit logging for email processing events."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class AuditLog:
    """Append-only JSON-lines log of parsing and storage events."""

    def __init__(self, log_path: Optional[Path] = None):
        """
        Initialize audit logger.

        Args:
            log_path: Path to audit log file (default: ~/.mailtrace/logs/audit.log)
        """
        if log_path is None:
            log_path = Path("~/.mailtrace/logs/audit.log").expanduser()

        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)

    def log_email_parsed(
        self,
        email_id: str,
        hop_count: int,
        esp_type: str,
        estimated_hops: int = 0,
    ) -> None:
        """
        Log a completed parse.

        Args:
            email_id: External message identifier
            hop_count: Number of hops in the reconstructed timeline
            esp_type: Classified ESP
            estimated_hops: Hops whose timestamp fell back to the current time
        """
        self.log_event(
            "email_parsed",
            email_id,
            {"hop_count": hop_count, "esp_type": esp_type, "estimated_hops": estimated_hops},
        )

    def log_event(self, event_type: str, email_id: str, metadata: Optional[dict] = None) -> None:
        """
        Log a general event.

        Args:
            event_type: Type of event (e.g., "email_created", "email_deleted")
            email_id: External message identifier
            metadata: Additional event metadata
        """
        event = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "email_id": email_id,
            **(metadata or {}),
        }

        self._write_event(event)

    def read_events(self) -> list[dict]:
        """Return all readable events; corrupt lines are skipped."""
        events = []

        if self.log_path.exists():
            with open(self.log_path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            events.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue

        return events

    def export_events(self, output_path: Path) -> int:
        """
        Export all events to a JSON file.

        Args:
            output_path: Path to output JSON file

        Returns:
            Number of exported events
        """
        events = self.read_events()

        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(events, f, indent=2, ensure_ascii=False)

        return len(events)

    def _write_event(self, event: dict) -> None:
        """
        Write event to log file.

        Args:
            event: Event dictionary
        """
        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")
