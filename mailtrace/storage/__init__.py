"""Data persistence layer"""

from .audit_log import AuditLog
from .database import (
    DatabaseConnection,
    DuplicateEmailError,
    EmailNotFoundError,
    EmailPage,
    EmailRepository,
    StorageError,
)

__all__ = [
    "AuditLog",
    "DatabaseConnection",
    "DuplicateEmailError",
    "EmailNotFoundError",
    "EmailPage",
    "EmailRepository",
    "StorageError",
]
