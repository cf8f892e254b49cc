"""Report formatting services."""

from .timeline_formatter import TimelineFormatter, delay_seconds

__all__ = ["TimelineFormatter", "delay_seconds"]
