"""Tests for utility functions."""

import pytest
from datetime import datetime, timedelta, timezone

from mailtrace.utils.date_utils import parse_header_date, to_iso8601, utc_now
from mailtrace.utils.unicode_utils import strip_brackets, truncate_subject


class TestDateUtils:
    """Test date utilities."""

    def test_rfc2822_with_offset(self):
        """Test offsets are honoured."""
        parsed = parse_header_date("Mon, 1 Jan 2024 10:00:00 -0800")
        assert parsed == datetime(2024, 1, 1, 18, 0, 0, tzinfo=timezone.utc)

    def test_trailing_zone_comment(self):
        """Test a trailing '(PST)' comment is tolerated."""
        assert parse_header_date("Mon, 01 Jan 2024 10:00:05 -0800 (PST)") is not None

    def test_naive_is_utc(self):
        """Test dates without offset are treated as UTC."""
        parsed = parse_header_date("Mon Jan 1 10:00:00 2024")
        assert parsed.tzinfo is not None
        assert parsed.utcoffset() == timedelta(0)

    def test_iso_format(self):
        """Test ISO 8601 text with a Z suffix."""
        parsed = parse_header_date("2024-01-01T10:00:05.000Z")
        assert parsed == datetime(2024, 1, 1, 10, 0, 5, tzinfo=timezone.utc)

    def test_slash_separated_layout(self):
        """Test layouts outside RFC 2822 and ISO 8601 are parsed leniently."""
        parsed = parse_header_date("2024/01/01 10:00:00 +0200")
        assert parsed == datetime(2024, 1, 1, 8, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["10:00", "queued 2024", "2024 at 10:00 maybe"])
    def test_lenient_parsing_needs_year_and_clock(self, value):
        """Test partial or wordy text is not completed from today's date."""
        assert parse_header_date(value) is None

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", "32 Foo 2024"])
    def test_unparseable(self, value):
        """Test garbage returns None instead of raising."""
        assert parse_header_date(value) is None

    def test_to_iso8601_converts_to_utc(self):
        """Test output is UTC with millisecond precision."""
        moment = datetime(2024, 1, 1, 10, 0, 5, 123456, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso8601(moment) == "2024-01-01T08:00:05.123Z"

    def test_to_iso8601_naive(self):
        """Test naive datetimes are formatted as UTC."""
        assert to_iso8601(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_utc_now_is_aware(self):
        assert utc_now().tzinfo is not None


class TestUnicodeUtils:
    """Test text utilities."""

    def test_truncate_subject_short(self):
        """Test short subject not truncated."""
        assert truncate_subject("Short subject") == "Short subject"

    def test_truncate_subject_long(self):
        """Test long subject truncated with ellipsis."""
        result = truncate_subject("A" * 60, max_length=50)

        assert len(result) == 50
        assert result.endswith("...")

    def test_truncate_subject_empty(self):
        assert truncate_subject(None) == ""
        assert truncate_subject("") == ""

    @pytest.mark.parametrize(
        "value, expected",
        [("[10.0.0.1]", "10.0.0.1"), (" mx.example.com ", "mx.example.com"), ("[ a ]", "a")],
    )
    def test_strip_brackets(self, value, expected):
        assert strip_brackets(value) == expected
