"""Tests for TimelineFormatter."""

import pytest
from datetime import datetime, timezone

from mailtrace.models.hop import Hop
from mailtrace.models.parsed_email import AuthenticationResult, ParsedEmail
from mailtrace.services.processing.email_processor import parse_email
from mailtrace.services.reporting.timeline_formatter import TimelineFormatter, delay_seconds


class TestDelaySeconds:
    """Test delay label conversion."""

    @pytest.mark.parametrize(
        "label, expected",
        [("5 sec", 5), ("0 sec", 0), ("~0 sec", 0), (None, 0), ("", 0)],
    )
    def test_labels(self, label, expected):
        assert delay_seconds(label) == expected


class TestTimelineFormatter:
    """Test timeline formatting for reports."""

    @pytest.fixture
    def default_config(self):
        """Default configuration for formatter."""
        return {
            "display": {
                "hop_template": "#{hop} {sender} -> {receiver} [{protocol}] {time} (+{delay}) {info}",
                "summary_template": "{hops} hops | transit {transit} sec | ESP: {esp} | {auth}",
                "subject_max_length": 20,
            }
        }

    @pytest.fixture
    def formatter(self, default_config):
        """Create TimelineFormatter with default config."""
        return TimelineFormatter(default_config)

    @pytest.fixture
    def hop(self):
        return Hop(
            index=0,
            sending_host="mail.example.com",
            receiving_host="mx.google.com",
            protocol="ESMTPS",
            timestamp=datetime(2024, 1, 1, 10, 0, 5, tzinfo=timezone.utc),
            delay="5 sec",
            annotation="for <x@gmail.com>",
        )

    def test_format_hop(self, formatter, hop):
        """Test a fully populated hop line."""
        assert formatter.format_hop(hop) == (
            "#0 mail.example.com -> mx.google.com [ESMTPS] "
            "2024-01-01T10:00:05.000Z (+5 sec) for <x@gmail.com>"
        )

    def test_format_hop_unknown_hosts_and_estimated_time(self, formatter, fixed_now):
        """Test unknown hosts render as '?' and estimated times are starred."""
        hop = Hop(index=2, receiving_host="", timestamp=fixed_now, timestamp_estimated=True)

        assert formatter.format_hop(hop) == "#2 ? -> ? [SMTP] 2024-06-01T12:00:00.000Z* (+?)"

    def test_format_summary(self, formatter, fixture_email):
        """Test hop count, transit total, ESP and auth verdicts."""
        parsed = parse_email(fixture_email("gmail_three_hops.eml"))

        assert formatter.format_summary(parsed) == (
            "3 hops | transit 9 sec | ESP: example.com | spf=pass dkim=pass dmarc=pass"
        )

    def test_format_summary_without_auth(self, formatter):
        """Test the placeholder when no verdicts are available."""
        parsed = ParsedEmail(subject="s", sender="a@example.com", auth_results=AuthenticationResult())

        assert formatter.format_summary(parsed).endswith("| no auth results")

    def test_format_report_truncates_subject(self, formatter, hop):
        """Test report heading, hop lines and summary."""
        parsed = ParsedEmail(
            subject="A very long subject line indeed",
            sender="a@example.com",
            timeline=(hop,),
            esp_type="Gmail",
        )
        lines = formatter.format_report(parsed).splitlines()

        assert lines[0] == "A very long subje... <a@example.com>"
        assert lines[1].startswith("  #0 mail.example.com")
        assert lines[2].startswith("1 hops | transit 5 sec | ESP: Gmail")

    def test_missing_display_section_uses_defaults(self, hop):
        """Test formatter works with an empty config."""
        formatter = TimelineFormatter({})

        assert formatter.format_hop(hop).startswith("#0 mail.example.com -> mx.google.com")
