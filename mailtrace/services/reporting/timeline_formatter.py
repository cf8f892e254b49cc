"""Timeline formatting for report output."""

import re
from typing import Dict

from mailtrace.models.hop import Hop
from mailtrace.models.parsed_email import ParsedEmail
from mailtrace.utils.date_utils import to_iso8601
from mailtrace.utils.unicode_utils import truncate_subject


DEFAULT_HOP_TEMPLATE = "#{hop} {sender} -> {receiver} [{protocol}] {time} (+{delay}) {info}"
DEFAULT_SUMMARY_TEMPLATE = "{hops} hops | transit {transit} sec | ESP: {esp} | {auth}"

_SECONDS = re.compile(r"^(\d+) sec$")


def delay_seconds(delay: str | None) -> int:
    """
    Numeric value of a delay label; approximate labels count as zero.

    Examples:
        >>> delay_seconds("12 sec")
        12
        >>> delay_seconds("~0 sec")
        0
    """
    match = _SECONDS.match(delay or "")
    return int(match.group(1)) if match else 0


class TimelineFormatter:
    """Format parsed emails and their hops for display."""

    def __init__(self, config: Dict):
        """
        Initialize formatter with configuration.

        Args:
            config: Configuration dict with a "display" section
        """
        display = config.get("display", {})
        self.hop_template = display.get("hop_template", DEFAULT_HOP_TEMPLATE)
        self.summary_template = display.get("summary_template", DEFAULT_SUMMARY_TEMPLATE)
        self.subject_max_length = display.get("subject_max_length", 60)

    def format_hop(self, hop: Hop) -> str:
        """
        Format one hop line.

        Args:
            hop: Hop to render

        Returns:
            Rendered line; unknown hosts render as "?"
        """
        time_text = to_iso8601(hop.timestamp)
        if hop.timestamp_estimated:
            time_text += "*"

        line = self.hop_template.format(
            hop=hop.index,
            sender=hop.sending_host or "?",
            receiver=hop.receiving_host or "?",
            protocol=hop.protocol,
            time=time_text,
            delay=hop.delay or "?",
            info=hop.annotation,
        )
        return line.rstrip()

    def format_summary(self, parsed: ParsedEmail) -> str:
        """Format the one-line summary: hop count, total transit, ESP, auth."""
        auth = parsed.auth_results.to_dict()
        auth_text = " ".join(f"{name}={value}" for name, value in auth.items()) or "no auth results"

        return self.summary_template.format(
            hops=parsed.hop_count,
            transit=sum(delay_seconds(hop.delay) for hop in parsed.timeline),
            esp=parsed.esp_type,
            auth=auth_text,
        )

    def format_report(self, parsed: ParsedEmail) -> str:
        """Format heading, hop lines and summary as one block of text."""
        lines = [
            f"{truncate_subject(parsed.subject, self.subject_max_length)} <{parsed.sender}>",
        ]
        lines.extend(f"  {self.format_hop(hop)}" for hop in parsed.timeline)
        lines.append(self.format_summary(parsed))
        return "\n".join(lines)
