"""USPS Web Tools TrackV2 (XML).

The request body is composed by hand and the response is read with regular
expressions rather than an XML object model: only a handful of elements are
needed and USPS error payloads are not always well-formed.
"""
from __future__ import annotations

import datetime as dt
import re
from typing import List, Optional
from xml.sax.saxutils import escape

from carrier_tracking.api.normalize import RawEvent, build_tracking_info, join_location
from carrier_tracking.detection import normalize_tracking_number
from carrier_tracking.errors import (
    CarrierApiError,
    CarrierResponseError,
    CarrierUnavailableError,
    GeographicRestrictionError,
    TrackingNotFoundError,
)
from carrier_tracking.models import TrackingInfo
from carrier_tracking.utils.timestamps import parse_timestamp

from .base import CarrierProvider, _truncate

CARRIER = "USPS"
SOURCE_ID = "carrier-tracking"

_ERROR_RE = re.compile(r"<Error\b[^>]*>([\s\S]*?)</Error>", re.IGNORECASE)
_DESCRIPTION_RE = re.compile(r"<Description[^>]*>([^<]*)</Description>", re.IGNORECASE)
_TRACK_INFO_RE = re.compile(r"<TrackInfo\b[^>]*>([\s\S]*?)</TrackInfo>", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"<TrackSummary\b[^>]*>([\s\S]*?)</TrackSummary>", re.IGNORECASE)
_DETAIL_RE = re.compile(r"<TrackDetail\b[^>]*>([\s\S]*?)</TrackDetail>", re.IGNORECASE)

_ATTR_ENTITIES = {'"': "&quot;"}

_GEO_MARKERS = ("not eligible", "geographic", "location")
_NOT_FOUND_MARKERS = ("not found", "could not locate", "not available", "invalid")

_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%m/%d/%Y", "%Y-%m-%d")
_TIME_FORMATS = ("%I:%M %p", "%I:%M%p", "%H:%M", "%H:%M:%S")


def _tag(block: str, name: str) -> Optional[str]:
    m = re.search(rf"<{name}\b[^>]*>([^<]*)</{name}>", block, re.IGNORECASE)
    if not m:
        return None
    return unescape_xml(m.group(1)).strip() or None


def unescape_xml(text: str) -> str:
    return (text.replace("&lt;", "<").replace("&gt;", ">").replace("&quot;", '"')
            .replace("&apos;", "'").replace("&amp;", "&"))


def build_track_request_xml(user_id: str, tracking_number: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<TrackFieldRequest USERID="{escape(user_id or "", _ATTR_ENTITIES)}">'
        "<Revision>1</Revision>"
        "<ClientIp>127.0.0.1</ClientIp>"
        f"<SourceId>{escape(SOURCE_ID)}</SourceId>"
        f'<TrackID ID="{escape(tracking_number, _ATTR_ENTITIES)}"></TrackID>'
        "</TrackFieldRequest>"
    )


def parse_usps_datetime(date: Optional[str], time: Optional[str]) -> Optional[dt.datetime]:
    """'January 6, 2016' + '9:24 am' (USPS local time, stored as UTC)."""
    if not date:
        return None
    day: Optional[dt.date] = None
    for fmt in _DATE_FORMATS:
        try:
            day = dt.datetime.strptime(date.strip(), fmt).date()
            break
        except ValueError:
            continue
    if day is None:
        return parse_timestamp(date if not time else f"{date}T{time}")

    clock = dt.time()
    if time:
        for fmt in _TIME_FORMATS:
            try:
                clock = dt.datetime.strptime(time.strip().upper(), fmt).time()
                break
            except ValueError:
                continue
    return dt.datetime.combine(day, clock, tzinfo=dt.timezone.utc)


def raise_for_usps_error(xml_text: str) -> None:
    """Raise the matching CarrierApiError if the payload carries an <Error> block."""
    m = _ERROR_RE.search(xml_text)
    if not m:
        return
    desc_match = _DESCRIPTION_RE.search(m.group(1))
    message = unescape_xml(desc_match.group(1)).strip() if desc_match else "Unknown error"
    lowered = message.lower()
    if any(marker in lowered for marker in _GEO_MARKERS):
        raise GeographicRestrictionError(
            CARRIER,
            f"Geographic Restriction: {message}. USPS Web Tools API may not be available in your region.",
        )
    if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
        raise TrackingNotFoundError(CARRIER, message)
    raise CarrierApiError(CARRIER, message)


def _event_from_block(block: str) -> Optional[RawEvent]:
    event = _tag(block, "Event")
    if not event:
        return None
    return RawEvent(
        status=event,
        location=join_location(_tag(block, "EventCity"), _tag(block, "EventState")),
        timestamp=parse_usps_datetime(_tag(block, "EventDate"), _tag(block, "EventTime")),
        description=event,
    )


def parse_usps_response(xml_text: str) -> List[RawEvent]:
    """TrackSummary (most recent) followed by each TrackDetail, in document order."""
    raise_for_usps_error(xml_text or "")

    info = _TRACK_INFO_RE.search(xml_text or "")
    if not info:
        raise CarrierResponseError(CARRIER, "response has no TrackInfo block")
    body = info.group(1)

    events: List[RawEvent] = []
    summary = _SUMMARY_RE.search(body)
    if summary:
        ev = _event_from_block(summary.group(1))
        if ev is not None:
            events.append(ev)
    for detail in _DETAIL_RE.finditer(body):
        ev = _event_from_block(detail.group(1))
        if ev is not None:
            events.append(ev)
    return events


class USPSProvider(CarrierProvider):
    """USPS Web Tools. The USERID travels inside the XML, not in a header."""

    extra_credentials = ("user_id",)

    def track(self, tracking_number: str) -> TrackingInfo:
        tn = normalize_tracking_number(tracking_number)
        xml_request = build_track_request_xml(self.credentials.user_id or "", tn)
        resp = self.request(
            "POST",
            self.config.endpoint("track", "/ShippingAPI.dll"),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data={"API": "TrackV2", "XML": xml_request},
        )
        if resp.status_code == 403:
            raise GeographicRestrictionError(
                CARRIER,
                "API access denied - geographic restrictions may apply. "
                "USPS Web Tools API is primarily available for US-based users.",
                status_code=403,
            )
        if resp.status_code == 429:
            raise CarrierUnavailableError(
                CARRIER, "API temporarily unavailable. Please try again later.", status_code=429)
        if not resp.ok:
            self.logger.warning("USPS returned status=%s response_body=%s",
                                resp.status_code, _truncate(resp.text))
            raise CarrierApiError(CARRIER, f"API error: {resp.status_code} {resp.reason}",
                                  status_code=resp.status_code)

        events = parse_usps_response(resp.text)
        return build_tracking_info(
            events,
            tracking_number=tn,
            carrier=self.name,
            map_status=self.map_status,
        )
