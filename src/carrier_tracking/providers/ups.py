from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Dict, List, Optional

from carrier_tracking.api.normalize import RawEvent, build_tracking_info, join_location
from carrier_tracking.detection import normalize_tracking_number
from carrier_tracking.errors import (
    CarrierApiError,
    CarrierResponseError,
    TrackingNotFoundError,
)
from carrier_tracking.models import TrackingInfo

from .base import CarrierProvider, _truncate

CARRIER = "UPS"


def parse_ups_datetime(date: Any, time: Any) -> Optional[dt.datetime]:
    """Combine UPS `date` (YYYYMMDD) and `time` (HHMMSS) into a UTC datetime.

    UPS reports local time without an offset; it is stored as UTC. A missing
    time means midnight. Returns None if the date is absent or malformed.
    """
    d = str(date or "").strip()
    t = str(time or "").strip() or "000000"
    if not d:
        return None
    for fmt in ("%Y%m%d%H%M%S", "%Y-%m-%d%H:%M:%S"):
        try:
            return dt.datetime.strptime(d + t, fmt).replace(tzinfo=dt.timezone.utc)
        except ValueError:
            continue
    return None


def _first(items: Any) -> Optional[Dict[str, Any]]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


def parse_ups_response(payload: Any) -> List[RawEvent]:
    """Extract activity from trackResponse.shipment[0].package[0].activity[]."""
    if not isinstance(payload, dict):
        raise CarrierResponseError(CARRIER, "response is not a JSON object")

    track_response = payload.get("trackResponse")
    if not isinstance(track_response, dict):
        raise CarrierResponseError(CARRIER, "response has no trackResponse")

    shipment = _first(track_response.get("shipment"))
    if shipment is None:
        raise TrackingNotFoundError(CARRIER, "Tracking number not found")

    package = _first(shipment.get("package"))
    if package is None:
        warning = _first(shipment.get("warnings")) or {}
        message = warning.get("message") or "Tracking number not found"
        raise TrackingNotFoundError(CARRIER, str(message))

    activities = package.get("activity")
    if not isinstance(activities, list):
        raise CarrierResponseError(CARRIER, "package has no activity list")

    events: List[RawEvent] = []
    for activity in activities:
        if not isinstance(activity, dict):
            continue
        status = activity.get("status") or {}
        address = (activity.get("location") or {}).get("address") or {}
        text = status.get("description") or status.get("type") or "Unknown"
        events.append(
            RawEvent(
                status=text,
                location=join_location(address.get("city"), address.get("stateProvinceCode")),
                timestamp=parse_ups_datetime(activity.get("date"), activity.get("time")),
                description=status.get("description") or status.get("type"),
            )
        )
    return events


class UPSProvider(CarrierProvider):
    """UPS Track API (JSON). OAuth client-credentials or static API key."""

    def track(self, tracking_number: str) -> TrackingInfo:
        tn = normalize_tracking_number(tracking_number)
        resp = self.request(
            "POST",
            self.config.endpoint("track", "/api/track/v1/details"),
            headers={"transId": uuid.uuid4().hex, "transactionSrc": "carrier-tracking"},
            json={
                "inquiryNumber": tn,
                "locale": "en_US",
                "returnSignature": False,
                "returnMilestones": True,
                "returnPOD": False,
            },
        )
        if resp.status_code == 404:
            raise TrackingNotFoundError(CARRIER, "Tracking number not found", status_code=404)
        if not resp.ok:
            self.logger.warning("UPS returned status=%s response_body=%s",
                                resp.status_code, _truncate(resp.text))
            raise CarrierApiError(CARRIER, f"API error: {resp.status_code} {resp.reason}",
                                  status_code=resp.status_code)
        try:
            payload = resp.json()
        except ValueError as ex:
            raise CarrierResponseError(CARRIER, "response is not JSON") from ex

        events = parse_ups_response(payload)
        return build_tracking_info(
            events,
            tracking_number=tn,
            carrier=self.name,
            map_status=self.map_status,
        )
