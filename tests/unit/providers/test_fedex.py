import datetime as dt

import pytest

from carrier_tracking.errors import CarrierApiError, TrackingNotFoundError
from carrier_tracking.models import CarrierCredentials, TrackingStatus
from carrier_tracking.providers.fedex import (
    SYNTHETIC_EVENT_SPACING,
    FedExProvider,
    latest_status_event,
    parse_fedex_response,
)

NOW = dt.datetime(2024, 5, 1, 12, tzinfo=dt.timezone.utc)


def _payload(scans=None, **result):
    tr = dict(result)
    if scans is not None:
        tr["scanEvents"] = scans
    return {"output": {"completeTrackResults": [{"trackResults": [tr]}]}}


def _scan(desc, date=None, city=None, state=None):
    s = {"eventDescription": desc, "date": date}
    if city:
        s["scanLocation"] = {"city": city, "stateOrProvinceCode": state}
    return s


@pytest.fixture
def provider(fake_transport, carrier_config):
    def _make(*responses):
        t = fake_transport(*responses)
        p = FedExProvider(carrier_config("FedEx"),
                          CarrierCredentials(client_id="cid", client_secret="sec"), t)
        p.access_token = "tok"
        p.token_expires_at = float("inf")
        return p, t
    return _make


def test_parse_scan_events_with_dates():
    events = parse_fedex_response(_payload([
        _scan("Delivered", "2024-04-30T15:00:00Z", "Reno", "NV"),
        _scan("On FedEx vehicle for delivery", "2024-04-30T08:00:00-07:00", "Reno", "NV"),
    ]), now=NOW)
    assert events[0].location == "Reno, NV"
    assert events[0].timestamp == dt.datetime(2024, 4, 30, 15, tzinfo=dt.timezone.utc)
    assert events[1].timestamp == dt.datetime(2024, 4, 30, 15, tzinfo=dt.timezone.utc)


def test_missing_dates_are_restamped_two_hours_apart():
    events = parse_fedex_response(_payload([
        _scan("Delivered", None),
        _scan("In transit", "2024-04-29T10:00:00Z"),
        _scan("Picked up", None),
    ]), now=NOW)
    assert [e.timestamp for e in events] == [
        NOW,
        NOW - SYNTHETIC_EVENT_SPACING,
        NOW - 2 * SYNTHETIC_EVENT_SPACING,
    ]
    assert SYNTHETIC_EVENT_SPACING == dt.timedelta(hours=2)


def test_top_level_notfound_error():
    payload = {"errors": [{"code": "TRACKING.TRACKINGNUMBER.NOTFOUND", "message": "not found"}]}
    with pytest.raises(TrackingNotFoundError):
        parse_fedex_response(payload)


def test_other_top_level_error():
    payload = {"errors": [{"code": "INTERNAL.SERVER.ERROR", "message": "oops"}]}
    with pytest.raises(CarrierApiError) as exc:
        parse_fedex_response(payload)
    assert not isinstance(exc.value, TrackingNotFoundError)


@pytest.mark.parametrize("payload", [
    {"output": {}},
    {"output": {"completeTrackResults": []}},
    {"output": {"completeTrackResults": [{"trackResults": []}]}},
    _payload(error={"code": "TRACKING.TRACKINGNUMBER.INVALID", "message": "Invalid"}),
])
def test_missing_result_is_not_found(payload):
    with pytest.raises(TrackingNotFoundError):
        parse_fedex_response(payload)


def test_latest_status_event():
    ev = latest_status_event({"latestStatusDetail": {
        "description": "Label created",
        "scanLocation": {"city": "Memphis", "stateOrProvinceCode": "TN"},
    }})
    assert ev.status == "Label created"
    assert ev.location == "Memphis, TN"
    assert ev.timestamp is None


def test_track_success(provider, make_response):
    body = _payload([
        _scan("On FedEx vehicle for delivery", "2024-04-30T08:00:00Z", "Reno", "NV"),
        _scan("Departed FedEx hub", "2024-04-29T22:00:00Z", "Memphis", "TN"),
    ])
    p, t = provider(make_response(json_body=body))
    info = p.track("123456789012")

    assert info.carrier == "FedEx"
    assert info.status is TrackingStatus.OUT_FOR_DELIVERY
    assert len(info.events) == 2
    call = t.calls[0]
    assert call["url"] == "https://apis-sandbox.fedex.com/track/v1/trackingnumbers"
    assert call["json"]["includeDetailedScans"] is True
    assert call["json"]["trackingInfo"][0]["trackingNumberInfo"]["trackingNumber"] == "123456789012"


def test_track_without_scans_uses_latest_status(provider, make_response):
    body = _payload(scans=[], latestStatusDetail={"description": "Label created"})
    p, _ = provider(make_response(json_body=body))
    info = p.track("123456789012")
    assert len(info.events) == 1
    assert info.events[0].status == "Label created"
    assert info.status is TrackingStatus.PENDING


def test_track_http_errors(provider, make_response):
    p, _ = provider(make_response(404, json_body={}))
    with pytest.raises(TrackingNotFoundError):
        p.track("123456789012")

    p, _ = provider(make_response(500, text="boom"))
    with pytest.raises(CarrierApiError) as exc:
        p.track("123456789012")
    assert exc.value.status_code == 500
