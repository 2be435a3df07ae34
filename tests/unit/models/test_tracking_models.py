import datetime as dt

from carrier_tracking.models import TrackingEvent, TrackingInfo, TrackingStatus


def test_status_coerce_accepts_values_and_names():
    assert TrackingStatus.coerce("In Transit") is TrackingStatus.IN_TRANSIT
    assert TrackingStatus.coerce("out for delivery") is TrackingStatus.OUT_FOR_DELIVERY
    assert TrackingStatus.coerce("DELIVERED") is TrackingStatus.DELIVERED
    assert TrackingStatus.coerce(TrackingStatus.PENDING) is TrackingStatus.PENDING
    assert TrackingStatus.coerce("weird") is TrackingStatus.UNKNOWN
    assert TrackingStatus.coerce(None) is TrackingStatus.UNKNOWN


def test_tracking_info_uppercases_and_synthesizes_event():
    ts = dt.datetime(2025, 1, 10, 12, 0, tzinfo=dt.timezone.utc)
    info = TrackingInfo(
        tracking_number=" 1z999aa1234567890 ",
        carrier="UPS",
        status="Delivered",
        timestamp=ts,
        location="Chicago, IL",
        description="Left at door",
    )
    assert info.tracking_number == "1Z999AA1234567890"
    assert info.status is TrackingStatus.DELIVERED
    assert len(info.events) == 1
    ev = info.events[0]
    assert ev.status == "Delivered"
    assert ev.location == "Chicago, IL"
    assert ev.timestamp == ts
    assert ev.description == "Left at door"


def test_naive_timestamps_become_utc():
    ev = TrackingEvent(status="x", timestamp=dt.datetime(2025, 1, 1, 8, 0))
    assert ev.timestamp.tzinfo is not None
    assert ev.timestamp.utcoffset() == dt.timedelta(0)


def test_event_status_defaults_to_unknown():
    assert TrackingEvent(status="").status == "Unknown"
    assert TrackingEvent().status == "Unknown"


def test_to_dict_is_json_friendly():
    info = TrackingInfo(tracking_number="123456789012", carrier="FedEx",
                        status=TrackingStatus.IN_TRANSIT,
                        timestamp=dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc),
                        source="mock")
    d = info.to_dict()
    assert d["status"] == "In Transit"
    assert d["timestamp"].startswith("2025-01-01T00:00:00")
    assert d["events"][0]["status"] == "In Transit"
    assert d["source"] == "mock"
