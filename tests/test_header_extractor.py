"""Tests for raw header extraction."""

import pytest

from mailtrace.services.email_parser.base import InvalidMessageError
from mailtrace.services.email_parser.header_extractor import (
    build_header_map,
    extract_headers,
    iter_header_lines,
    split_header_line,
)


class TestIterHeaderLines:
    """Test logical header line unfolding."""

    def test_stops_at_first_blank_line(self):
        """Test body lines are never yielded."""
        raw = "Subject: Hi\nFrom: a@example.com\n\nReceived: from body by body; x\n"
        assert list(iter_header_lines(raw)) == ["Subject: Hi", "From: a@example.com"]

    def test_folds_space_and_tab_continuations(self):
        """Test continuation lines are trimmed and joined with one space."""
        raw = "Subject: part one\n\tpart two\n    part three\nTo: b@example.com\n"
        assert list(iter_header_lines(raw)) == [
            "Subject: part one part two part three",
            "To: b@example.com",
        ]

    def test_handles_crlf_line_endings(self):
        """Test CRLF messages unfold the same as LF messages."""
        raw = "Subject: a\r\n b\r\n\r\nbody"
        assert list(iter_header_lines(raw)) == ["Subject: a b"]

    @pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x85", "\x0b", "\x0c", "\x1c", "\x1e"])
    def test_only_newlines_end_a_line(self, separator):
        """Test Unicode line separators stay inside the header value."""
        raw = f"Subject: Invoice{separator}Received: from evil.example\nTo: a@example.com\n"
        assert list(iter_header_lines(raw)) == [
            f"Subject: Invoice{separator}Received: from evil.example",
            "To: a@example.com",
        ]

    def test_leading_continuation_is_ignored(self):
        """Test a continuation with no preceding header is dropped."""
        assert list(iter_header_lines("  orphan\nSubject: x\n")) == ["Subject: x"]


class TestSplitHeaderLine:
    """Test name/value splitting."""

    def test_lowercases_and_trims(self):
        """Test header name is lower-cased and value trimmed."""
        assert split_header_line("Message-ID:  <a@b>  ") == ("message-id", "<a@b>")

    def test_splits_at_first_colon_only(self):
        """Test values containing colons are preserved."""
        assert split_header_line("Date: Mon, 1 Jan 2024 10:00:00 +0000") == (
            "date",
            "Mon, 1 Jan 2024 10:00:00 +0000",
        )

    @pytest.mark.parametrize(
        "line", ["no colon here", ": empty name", "bad name: value", "\u2028Received: x"]
    )
    def test_malformed_lines_are_skipped(self, line):
        """Test malformed lines yield None instead of raising."""
        assert split_header_line(line) is None


class TestBuildHeaderMap:
    """Test header map folding."""

    def test_repeated_names_are_space_joined_in_order(self):
        """Test multiple occurrences are concatenated with a single space."""
        headers = build_header_map([("x-tag", "one"), ("subject", "s"), ("x-tag", "two")])
        assert headers["x-tag"] == "one two"
        assert headers["subject"] == "s"

    def test_map_is_read_only(self):
        """Test the map cannot be mutated after construction."""
        headers = build_header_map([("subject", "s")])
        with pytest.raises(TypeError):
            headers["subject"] = "changed"


class TestExtractHeaders:
    """Test full header extraction."""

    def test_received_with_two_continuations_is_one_trace_header(self):
        """Test folded Received header becomes a single space-joined value."""
        raw = (
            "Received: from a.example.com\n"
            "\tby b.example.com\n"
            "  with ESMTP; Mon, 1 Jan 2024 10:00:00 +0000\n"
            "Subject: x\n"
            "\n"
            "body\n"
        )
        extracted = extract_headers(raw)

        assert extracted.trace_headers == (
            "from a.example.com by b.example.com with ESMTP; Mon, 1 Jan 2024 10:00:00 +0000",
        )

    def test_trace_headers_keep_document_order(self):
        """Test Received and X-Received are collected newest-first as written."""
        raw = "Received: first\nX-Received: second\nSubject: s\nRECEIVED: third\n\n"
        extracted = extract_headers(raw)

        assert extracted.trace_headers == ("first", "second", "third")

    def test_trace_headers_in_body_are_ignored(self, fixture_email):
        """Test Received lines after the blank line are not collected."""
        extracted = extract_headers(fixture_email("gmail_three_hops.eml"))

        assert len(extracted.trace_headers) == 3
        assert all("fake.body" not in value for value in extracted.trace_headers)

    def test_line_separator_in_value_cannot_add_trace_header(self):
        """Test text after U+2028 inside a Subject is not a Received header."""
        raw = (
            "Subject: Invoice\u2028Received: from evil.example by forged.example with SMTP; "
            "Mon, 1 Jan 2024 09:00:00 +0000\n"
            "Received: from a.example by b.example with SMTP; Mon, 1 Jan 2024 10:00:00 +0000\n"
            "\n"
        )
        extracted = extract_headers(raw)

        assert extracted.get("subject").startswith("Invoice\u2028Received: from evil.example")
        assert extracted.trace_headers == (
            "from a.example by b.example with SMTP; Mon, 1 Jan 2024 10:00:00 +0000",
        )

    def test_empty_trace_header_is_kept(self):
        """Test an empty Received value still counts as a trace header."""
        extracted = extract_headers("Received:\nSubject: s\n\n")
        assert extracted.trace_headers == ("",)

    def test_folded_header_continuation_with_colon_is_not_a_new_header(self):
        """Test continuation text such as 'h=from:to' stays in its header."""
        raw = "DKIM-Signature: v=1; a=rsa-sha256;\n\th=from:to:subject; bh=abc\nSubject: s\n\n"
        extracted = extract_headers(raw)

        assert extracted.get("dkim-signature") == "v=1; a=rsa-sha256; h=from:to:subject; bh=abc"
        assert set(extracted.headers) == {"dkim-signature", "subject"}

    def test_get_first_and_all(self):
        """Test accessor helpers."""
        extracted = extract_headers("Date: first\nDate: second\n\n")

        assert extracted.get("Date") == "first second"
        assert extracted.first("date") == "first"
        assert extracted.all("DATE") == ["first", "second"]
        assert extracted.get("missing", "fallback") == "fallback"
        assert extracted.first("missing") is None

    def test_no_headers(self):
        """Test empty text yields an empty extraction."""
        extracted = extract_headers("")

        assert extracted.trace_headers == ()
        assert dict(extracted.headers) == {}

    def test_non_text_input_raises(self):
        """Test bytes input is rejected as a caller error."""
        with pytest.raises(InvalidMessageError):
            extract_headers(b"Subject: bytes\n\n")
