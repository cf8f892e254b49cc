"""Delivery timeline reconstruction services."""

from .esp_classifier import classify_esp
from .received_parser import parse_received_header
from .timeline_builder import assign_delays, reconstruct_timeline

__all__ = [
    "assign_delays",
    "classify_esp",
    "parse_received_header",
    "reconstruct_timeline",
]
