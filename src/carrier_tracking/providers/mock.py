from __future__ import annotations

import datetime as dt
from typing import Optional

from carrier_tracking.detection import normalize_tracking_number
from carrier_tracking.models import TrackingEvent, TrackingInfo, TrackingStatus
from carrier_tracking.utils.timestamps import utc_now

from .base import CarrierProvider

SYNTHETIC_LOCATION = "Unknown Location"
SYNTHETIC_DESCRIPTION = "Package information not available"


def synthetic_tracking_info(tracking_number: str, carrier: str,
                            *, now: Optional[dt.datetime] = None) -> TrackingInfo:
    """Last-resort record: In Transit, unknown location, exactly one event."""
    now = now or utc_now()
    event = TrackingEvent(
        status=TrackingStatus.IN_TRANSIT.value,
        location=SYNTHETIC_LOCATION,
        timestamp=now,
        description=SYNTHETIC_DESCRIPTION,
    )
    return TrackingInfo(
        tracking_number=normalize_tracking_number(tracking_number),
        carrier=carrier,
        status=TrackingStatus.IN_TRANSIT,
        location=SYNTHETIC_LOCATION,
        timestamp=now,
        description=SYNTHETIC_DESCRIPTION,
        events=(event,),
        source="synthetic",
    )


class MockCarrierProvider(CarrierProvider):
    """Stand-in registered when a real provider cannot be initialized.

    Registered with an auth-free copy of the carrier config, so it reports
    itself available and `track()` never touches the network.
    """

    def initialize(self) -> None:
        return None

    def track(self, tracking_number: str) -> TrackingInfo:
        mock = self.get_mock_data(tracking_number)
        if mock is not None:
            return mock
        return self.synthetic(tracking_number)

    def synthetic(self, tracking_number: str) -> TrackingInfo:
        return synthetic_tracking_info(tracking_number, self.name)


class MockUPSProvider(MockCarrierProvider):
    """UPS stand-in that produces a plausible three-scan route instead of the
    one-event generic record."""

    def synthetic(self, tracking_number: str) -> TrackingInfo:
        now = utc_now()
        events = (
            TrackingEvent(status="In Transit", location="Memphis, TN", timestamp=now,
                          description="Package in transit to next facility"),
            TrackingEvent(status="Arrived at Facility", location="Louisville, KY",
                          timestamp=now - dt.timedelta(days=1),
                          description="Package arrived at UPS facility"),
            TrackingEvent(status="Picked Up", location="New York, NY",
                          timestamp=now - dt.timedelta(days=2),
                          description="Package picked up by UPS"),
        )
        return TrackingInfo(
            tracking_number=normalize_tracking_number(tracking_number),
            carrier=self.name,
            status=TrackingStatus.IN_TRANSIT,
            location=events[0].location,
            timestamp=now,
            description=events[0].description,
            events=events,
            source="synthetic",
        )
