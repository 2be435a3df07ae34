from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from carrier_tracking.api.normalize import RawEvent, build_tracking_info, join_location
from carrier_tracking.detection import normalize_tracking_number
from carrier_tracking.errors import (
    CarrierApiError,
    CarrierResponseError,
    TrackingNotFoundError,
)
from carrier_tracking.models import TrackingInfo
from carrier_tracking.utils.timestamps import parse_timestamp, utc_now

from .base import CarrierProvider, _truncate

CARRIER = "FedEx"

# The FedEx sandbox frequently returns scan events with null dates. When any
# date is missing, events are re-stamped `now - index * SYNTHETIC_EVENT_SPACING`
# to keep most-recent-first ordering; the spacing itself carries no meaning.
SYNTHETIC_EVENT_SPACING = dt.timedelta(hours=2)


def _track_result(payload: Any) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise CarrierResponseError(CARRIER, "response is not a JSON object")

    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0] if isinstance(errors[0], dict) else {}
        code = str(first.get("code") or "")
        message = str(first.get("message") or code or "API error")
        if "NOTFOUND" in code.upper():
            raise TrackingNotFoundError(CARRIER, message)
        raise CarrierApiError(CARRIER, message)

    output = payload.get("output")
    ctr = output.get("completeTrackResults") if isinstance(output, dict) else None
    if not isinstance(ctr, list) or not ctr or not isinstance(ctr[0], dict):
        raise TrackingNotFoundError(CARRIER, "Tracking number not found")

    results = ctr[0].get("trackResults")
    if not isinstance(results, list) or not results or not isinstance(results[0], dict):
        raise TrackingNotFoundError(CARRIER, "Tracking number not found")

    result = results[0]
    error = result.get("error")
    if isinstance(error, dict) and error:
        raise TrackingNotFoundError(CARRIER, str(error.get("message") or error.get("code")
                                                 or "Tracking number not found"))
    return result


def _scan_location(loc: Any) -> Optional[str]:
    if not isinstance(loc, dict):
        return None
    return join_location(loc.get("city"), loc.get("stateOrProvinceCode"))


def latest_status_event(result: Dict[str, Any]) -> RawEvent:
    """Single event built from latestStatusDetail, used when there are no scans."""
    lsd = result.get("latestStatusDetail") or {}
    if not isinstance(lsd, dict):
        lsd = {}
    return RawEvent(
        status=lsd.get("description") or lsd.get("statusByLocale") or "Unknown",
        location=_scan_location(lsd.get("scanLocation")),
        timestamp=None,
        description=lsd.get("description") or "Package tracked",
    )


def parse_fedex_response(payload: Any, *, now: Optional[dt.datetime] = None) -> List[RawEvent]:
    """Extract scan events from output.completeTrackResults[0].trackResults[0].scanEvents[].

    Returns an empty list when the shipment has no scan events; see
    `latest_status_event` for the fallback.
    """
    result = _track_result(payload)
    scans = result.get("scanEvents")
    if not isinstance(scans, list):
        return []

    events: List[RawEvent] = []
    for scan in scans:
        if not isinstance(scan, dict):
            continue
        text = scan.get("eventDescription") or scan.get("derivedStatus") or "Unknown"
        events.append(
            RawEvent(
                status=text,
                location=_scan_location(scan.get("scanLocation")),
                timestamp=parse_timestamp(scan.get("date")),
                description=scan.get("eventDescription") or None,
            )
        )

    if any(e.timestamp is None for e in events):
        now = now or utc_now()
        for index, event in enumerate(events):
            event.timestamp = now - index * SYNTHETIC_EVENT_SPACING
    return events


class FedExProvider(CarrierProvider):
    """FedEx Track API (JSON) behind an OAuth client-credentials token."""

    def track(self, tracking_number: str) -> TrackingInfo:
        tn = normalize_tracking_number(tracking_number)
        resp = self.request(
            "POST",
            self.config.endpoint("track", "/track/v1/trackingnumbers"),
            json={
                "includeDetailedScans": True,
                "trackingInfo": [{"trackingNumberInfo": {"trackingNumber": tn}}],
            },
        )
        if not resp.ok:
            self.logger.warning("FedEx returned status=%s response_body=%s",
                                resp.status_code, _truncate(resp.text))
            if resp.status_code == 404:
                raise TrackingNotFoundError(CARRIER, "Tracking number not found", status_code=404)
            raise CarrierApiError(CARRIER, f"API error: {resp.status_code} {resp.reason}",
                                  status_code=resp.status_code)
        try:
            payload = resp.json()
        except ValueError as ex:
            raise CarrierResponseError(CARRIER, "response is not JSON") from ex

        events = parse_fedex_response(payload)
        fallback = latest_status_event(_track_result(payload)) if not events else None
        return build_tracking_info(
            events,
            tracking_number=tn,
            carrier=self.name,
            map_status=self.map_status,
            fallback=fallback,
        )
