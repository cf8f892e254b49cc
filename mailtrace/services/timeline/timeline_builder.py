"""Chronological delivery timeline reconstruction."""

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Sequence

from loguru import logger

from mailtrace.models.hop import Hop
from mailtrace.utils.date_utils import parse_header_date, utc_now
from .received_parser import annotate_gmail, parse_received_header


APPROXIMATE_ZERO = "~0 sec"
_ONE_MS = timedelta(milliseconds=1)


def _rounded_seconds(milliseconds: int) -> int:
    # half-up: 1500 ms -> 2
    return (milliseconds + 500) // 1000


def first_hop_delay(hop_time: datetime, sent_time: datetime) -> str:
    """
    Delay between message creation (Date header) and the first hop.

    The magnitude is used, so a Date slightly after the first hop still
    yields a positive figure. Sub-second gaps are reported as "~0 sec".
    """
    milliseconds = abs(hop_time - sent_time) // _ONE_MS
    if milliseconds < 1000:
        return APPROXIMATE_ZERO
    return f"{_rounded_seconds(milliseconds)} sec"


def hop_delay(current: datetime, previous: datetime) -> str:
    """
    Delay between two consecutive hops.

    Negative differences (clock skew between servers) are reported as
    "~0 sec" rather than a negative duration.
    """
    milliseconds = (current - previous) // _ONE_MS
    if milliseconds > 0:
        return f"{_rounded_seconds(milliseconds)} sec"
    if milliseconds == 0:
        return "0 sec"
    return APPROXIMATE_ZERO


def assign_delays(hops: Sequence[Hop], sent_time: datetime) -> list[Hop]:
    """
    Enrichment pass: attach delays and Gmail annotations to ordered hops.

    Args:
        hops: Hops in chronological order
        sent_time: Message creation time used as reference for hop 0

    Returns:
        New Hop instances; the input is left untouched
    """
    enriched = []
    for position, hop in enumerate(hops):
        if position == 0:
            delay = first_hop_delay(hop.timestamp, sent_time)
        else:
            delay = hop_delay(hop.timestamp, hops[position - 1].timestamp)
        enriched.append(annotate_gmail(replace(hop, delay=delay)))
    return enriched


def reconstruct_timeline(
    trace_headers: Sequence[str],
    date_value: Optional[str],
    now: Optional[datetime] = None,
) -> list[Hop]:
    """
    Build the chronological hop list from newest-first trace headers.

    Args:
        trace_headers: Received/X-Received values in document order
        date_value: Raw Date header value (may be missing or unparseable)
        now: Substitute for unparseable timestamps (default: current time)

    Returns:
        One Hop per trace header, index 0 = earliest

    Notes:
        - A missing or unparseable Date makes hop 0's delay relative to
          `now`, which is an approximation, not an error
    """
    now = now or utc_now()

    hops = [
        parse_received_header(value, index=index, now=now)
        for index, value in enumerate(reversed(trace_headers))
    ]

    sent_time = parse_header_date(date_value)
    if sent_time is None:
        if hops:
            logger.warning(f"Unparseable Date header {date_value!r}, hop 0 delay is approximate")
        sent_time = now

    timeline = assign_delays(hops, sent_time)
    logger.debug(f"Reconstructed timeline with {len(timeline)} hops")
    return timeline
