from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

from carrier_tracking.models import TrackingEvent, TrackingInfo, TrackingStatus
from carrier_tracking.utils.timestamps import coerce_timestamp, utc_now


@dataclass
class RawEvent:
    """Carrier-neutral intermediate event produced by the per-carrier parsers.

    `timestamp` is None when the carrier gave nothing parseable; the
    normalizer substitutes the current time.
    """

    status: str = ""
    location: Optional[str] = None
    timestamp: Optional[dt.datetime] = None
    description: Optional[str] = None


def clean_text(value: Any) -> Optional[str]:
    text = str(value).strip() if value is not None else ""
    return text or None


def join_location(city: Any, state: Any) -> Optional[str]:
    """'City, ST' when both parts are present, otherwise None."""
    c, s = clean_text(city), clean_text(state)
    if c and s:
        return f"{c}, {s}"
    return None


def _ordered(events: List[TrackingEvent], had_times: bool) -> List[TrackingEvent]:
    # Only reorder when every event carried a real carrier timestamp; otherwise
    # the carrier's own most-recent-first order is the best information we have.
    if had_times:
        return sorted(events, key=lambda e: e.timestamp, reverse=True)
    return events


def build_tracking_info(
    raw_events: Iterable[RawEvent],
    *,
    tracking_number: str,
    carrier: str,
    map_status: Callable[[str], TrackingStatus],
    fallback: Optional[RawEvent] = None,
    source: str = "live",
    now: Optional[dt.datetime] = None,
) -> TrackingInfo:
    """
    Turn a parser's RawEvent list into a TrackingInfo.

    - Event statuses stay as raw carrier text; the top-level status is the
      normalized mapping of the most recent event's status.
    - Missing timestamps become `now`.
    - An empty list uses `fallback` (or an "Unknown" placeholder) as the
      single event, so `events` is never empty.
    """
    now = now or utc_now()
    raws = [r for r in raw_events if r is not None]
    had_times = bool(raws) and all(r.timestamp is not None for r in raws)

    events = [
        TrackingEvent(
            status=clean_text(r.status) or "Unknown",
            location=clean_text(r.location),
            timestamp=coerce_timestamp(r.timestamp, default=now),
            description=clean_text(r.description),
        )
        for r in raws
    ]
    events = _ordered(events, had_times)

    if not events:
        fb = fallback or RawEvent(status="Unknown",
                                  description="No tracking information available")
        events = [
            TrackingEvent(
                status=clean_text(fb.status) or "Unknown",
                location=clean_text(fb.location),
                timestamp=coerce_timestamp(fb.timestamp, default=now),
                description=clean_text(fb.description),
            )
        ]

    latest = events[0]
    return TrackingInfo(
        tracking_number=tracking_number,
        carrier=carrier,
        status=map_status(latest.status),
        location=latest.location,
        timestamp=latest.timestamp,
        description=latest.description,
        events=tuple(events),
        source=source,
    )
