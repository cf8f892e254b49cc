"""Email processing pipeline."""

from .email_processor import EmailProcessor, parse_email

__all__ = ["EmailProcessor", "parse_email"]
