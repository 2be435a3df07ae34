from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

from carrier_tracking.utils.timestamps import coerce_timestamp


class TrackingStatus(str, Enum):
    """Normalized status every carrier vocabulary is mapped into."""

    IN_TRANSIT = "In Transit"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    EXCEPTION = "Exception"
    PENDING = "Pending"
    UNKNOWN = "Unknown"

    @classmethod
    def coerce(cls, value: Any) -> "TrackingStatus":
        """Accept a member, its value ("In Transit") or its name ("IN_TRANSIT")."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for member in cls:
            if text.lower() in (member.value.lower(), member.name.lower()):
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class TrackingEvent:
    # raw carrier status text, not the normalized enum
    status: str = "Unknown"
    timestamp: dt.datetime = field(default_factory=lambda: coerce_timestamp(None))
    location: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", str(self.status or "Unknown"))
        object.__setattr__(self, "timestamp", coerce_timestamp(self.timestamp))

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "location": self.location,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
        }


@dataclass(frozen=True)
class TrackingInfo:
    """Canonical tracking result.

    - `tracking_number` is uppercased on construction.
    - `events` is most-recent-first and never empty: when no events are
      given a single event mirroring the top-level fields is synthesized.
    - `source` records which path produced the record
      ("live", "mock", "synthetic" or "cache").
    """

    tracking_number: str
    carrier: str
    status: TrackingStatus
    timestamp: dt.datetime
    events: Sequence[TrackingEvent] = ()
    location: Optional[str] = None
    description: Optional[str] = None
    source: str = "live"

    def __post_init__(self) -> None:
        object.__setattr__(self, "tracking_number",
                           str(self.tracking_number or "").strip().upper())
        object.__setattr__(self, "status", TrackingStatus.coerce(self.status))
        object.__setattr__(self, "timestamp", coerce_timestamp(self.timestamp))

        events = tuple(self.events or ())
        if not events:
            events = (
                TrackingEvent(
                    status=self.status.value,
                    location=self.location,
                    timestamp=self.timestamp,
                    description=self.description,
                ),
            )
        object.__setattr__(self, "events", events)

    @property
    def latest_event(self) -> TrackingEvent:
        return self.events[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "trackingNumber": self.tracking_number,
            "carrier": self.carrier,
            "status": self.status.value,
            "location": self.location,
            "timestamp": self.timestamp.isoformat(),
            "description": self.description,
            "events": [e.to_dict() for e in self.events],
            "source": self.source,
        }
