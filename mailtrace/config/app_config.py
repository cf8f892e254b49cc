"""Configuration models for mailtrace."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class IngestionConfig(BaseModel):
    """Which messages the processor accepts and how duplicates are handled."""

    accepted_subjects: list[str] = Field(default_factory=list)
    accepted_senders: list[str] = Field(default_factory=list)
    skip_existing: bool = True

    def accepts(self, subject: str, sender: str) -> bool:
        """
        Check a message against the configured filters.

        Empty filter lists accept everything; otherwise a case-insensitive
        substring match against any entry is required.
        """
        return self._matches(self.accepted_subjects, subject) and self._matches(
            self.accepted_senders, sender
        )

    @staticmethod
    def _matches(patterns: list[str], value: str) -> bool:
        if not patterns:
            return True
        lowered = (value or "").lower()
        return any(pattern.lower() in lowered for pattern in patterns)


class DisplayConfig(BaseModel):
    """Display templates for timeline reports."""

    hop_template: str = "#{hop} {sender} -> {receiver} [{protocol}] {time} (+{delay}) {info}"
    summary_template: str = "{hops} hops | transit {transit} sec | ESP: {esp} | {auth}"
    subject_max_length: int = 60

    @field_validator("subject_max_length")
    def validate_length(cls, v: int) -> int:
        if v < 4:
            raise ValueError("subject_max_length must be at least 4")
        return v


class StorageConfig(BaseModel):
    """Storage configuration."""

    database_path: str = "~/.mailtrace/emails.db"
    audit_log_path: str = "~/.mailtrace/logs/audit.log"

    def get_database_path(self) -> Path:
        """Get expanded database path."""
        return Path(self.database_path).expanduser()

    def get_audit_log_path(self) -> Path:
        """Get expanded audit log path."""
        return Path(self.audit_log_path).expanduser()


class AppConfig(BaseModel):
    """Main application configuration."""

    schema_version: str = "1.0"
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @field_validator("schema_version")
    def validate_schema_version(cls, v: str) -> str:
        if not v:
            raise ValueError("schema_version is required")
        return v
