"""Utility functions"""

from .date_utils import parse_header_date, to_iso8601, utc_now
from .unicode_utils import strip_brackets, truncate_subject

__all__ = ["parse_header_date", "to_iso8601", "utc_now", "strip_brackets", "truncate_subject"]
