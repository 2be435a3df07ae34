from __future__ import annotations

import base64
import datetime as dt
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple

import requests

from carrier_tracking.api.normalize import clean_text
from carrier_tracking.api.transport import RequestsTransport
from carrier_tracking.detection import normalize_tracking_number
from carrier_tracking.errors import (
    CarrierApiError,
    CarrierNetworkError,
    CarrierTimeoutError,
    ProviderInitializationError,
)
from carrier_tracking.models import (
    REQUIRED_CREDENTIALS,
    AuthType,
    CarrierConfig,
    CarrierCredentials,
    TrackingEvent,
    TrackingInfo,
    TrackingStatus,
)
from carrier_tracking.utils.timestamps import coerce_timestamp, utc_now

_BODY_LOG_LIMIT = 2000


def _truncate(text: Optional[str], limit: int = _BODY_LOG_LIMIT) -> Optional[str]:
    if text and len(text) > limit:
        return text[:limit] + "..."
    return text


class CarrierProvider(ABC):
    """Shared behaviour for every carrier adapter.

    Subclasses implement `track()` and reuse the rest:
    - initialize(): credential check, plus an OAuth client-credentials token
      when `auth_type` is oauth.
    - is_available(): pure check of credentials against the auth type.
    - get_mock_data(): canned record from `config.mock_data`, re-stamped per call.
    - request(): authenticated, timeout-bounded HTTP call.
    - map_status(): table-driven status normalization.
    """

    # Credential fields required on top of the auth type's own (USPS needs user_id).
    extra_credentials: Tuple[str, ...] = ()

    def __init__(
        self,
        config: CarrierConfig,
        credentials: Optional[CarrierCredentials] = None,
        transport: Optional[RequestsTransport] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.credentials = credentials or CarrierCredentials()
        self.transport = transport or RequestsTransport(
            timeout=config.timeout, max_retries=config.retries)
        self.access_token: Optional[str] = None
        self.token_expires_at: float = 0.0
        self.logger: logging.Logger = logger or logging.getLogger(
            f"carrier_tracking.providers.{config.name.lower()}"
        )

    @property
    def name(self) -> str:
        return self.config.name

    # --- lifecycle ---------------------------------------------------------

    def initialize(self) -> None:
        """One-time setup before `track()` can succeed.

        Raises ProviderInitializationError when credentials are missing or the
        OAuth token cannot be obtained; the registry then registers a mock.
        """
        if not self.is_available():
            raise ProviderInitializationError(self.name, "credentials not configured")
        if self.config.auth_type is AuthType.OAUTH:
            self.initialize_oauth()

    def is_available(self) -> bool:
        required = REQUIRED_CREDENTIALS.get(self.config.auth_type)
        if required is None:
            return False
        return self.credentials.has(*required, *self.extra_credentials)

    def initialize_oauth(self) -> str:
        """Acquire a bearer token with the client-credentials grant (form body)."""
        if not self.credentials.has("client_id", "client_secret"):
            raise ProviderInitializationError(self.name, "OAuth credentials not configured")

        url = self.config.url_for(self.config.endpoint("oauth"))
        data = {
            "grant_type": "client_credentials",
            "client_id": self.credentials.client_id,
            "client_secret": self.credentials.client_secret,
        }
        self.logger.debug("Requesting %s OAuth token from %s", self.name, url)
        try:
            resp = self.transport.post(
                url,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data=data,
                timeout=self.config.timeout,
            )
        except requests.RequestException as ex:
            raise ProviderInitializationError(self.name, f"token request failed: {ex}") from ex

        if not resp.ok:
            self.logger.warning(
                "%s token request returned status=%s response_body=%s",
                self.name, resp.status_code, _truncate(resp.text),
            )
            raise ProviderInitializationError(
                self.name, f"OAuth failed: {resp.status_code} {resp.reason}")

        try:
            body = resp.json()
        except ValueError as ex:
            raise ProviderInitializationError(self.name, "OAuth response is not JSON") from ex

        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise ProviderInitializationError(self.name, "OAuth response has no access_token")

        self.access_token = str(token)
        self.token_expires_at = time.time() + int(body.get("expires_in") or 3600)
        self.logger.debug("%s token acquired (expires_in=%s)", self.name, body.get("expires_in"))
        return self.access_token

    # --- requests ----------------------------------------------------------

    def auth_headers(self) -> Dict[str, str]:
        auth = self.config.auth_type
        creds = self.credentials
        if auth is AuthType.OAUTH and self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        if auth in (AuthType.BEARER, AuthType.API_KEY) and creds.api_key:
            return {"Authorization": f"Bearer {creds.api_key}"}
        if auth is AuthType.BASIC and creds.username and creds.password:
            token = base64.b64encode(
                f"{creds.username}:{creds.password}".encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {token}"}
        return {}

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        json: Any = None,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        """Authenticated call to `api_endpoint + endpoint`, bounded by config.timeout.

        A timeout surfaces as CarrierTimeoutError, any other transport failure
        as CarrierNetworkError, a failed token refresh as CarrierApiError.
        HTTP error statuses are returned to the caller.
        """
        if (self.config.auth_type is AuthType.OAUTH and self.access_token
                and time.time() >= self.token_expires_at - 10):
            try:
                self.initialize_oauth()
            except ProviderInitializationError as ex:
                raise CarrierApiError(self.name, f"token refresh failed: {ex}") from ex

        merged: Dict[str, str] = {"Content-Type": "application/json"}
        merged.update(headers or {})
        merged.update(self.auth_headers())

        url = self.config.url_for(endpoint)
        self.logger.debug("%s %s %s", self.name, method.upper(), url)
        try:
            return self.transport.request(
                method, url, headers=merged, json=json, data=data, params=params,
                timeout=self.config.timeout,
            )
        except requests.Timeout as ex:
            raise CarrierTimeoutError(
                self.name, f"request timed out after {self.config.timeout}s") from ex
        except requests.RequestException as ex:
            raise CarrierNetworkError(self.name, f"network error: {ex}") from ex

    # --- normalization helpers ---------------------------------------------

    def map_status(self, carrier_status: Optional[str]) -> TrackingStatus:
        text = (carrier_status or "").lower()
        if not text:
            return TrackingStatus.UNKNOWN
        for needle, status in self.config.status_mapping:
            if needle in text:
                return status
        return TrackingStatus.UNKNOWN

    def create_event(self, event_data: Mapping[str, Any], *, now: Optional[dt.datetime] = None) -> TrackingEvent:
        """TrackingEvent from a loose mapping (mock records, tests)."""
        now = now or utc_now()
        if event_data.get("timestamp"):
            timestamp = coerce_timestamp(event_data.get("timestamp"), default=now)
        elif event_data.get("hoursAgo") is not None:
            timestamp = now - dt.timedelta(hours=float(event_data["hoursAgo"]))
        else:
            timestamp = now
        return TrackingEvent(
            status=clean_text(event_data.get("status")) or "Unknown",
            location=clean_text(event_data.get("location")),
            timestamp=timestamp,
            description=clean_text(event_data.get("description")),
        )

    def get_mock_data(self, tracking_number: str) -> Optional[TrackingInfo]:
        """Canned record for an exact tracking number, or None.

        Timestamps are resolved now, not at config-load time: `hoursAgo` is
        relative to the call, absent timestamps become the call time.
        """
        tn = normalize_tracking_number(tracking_number)
        record = self.config.mock_data.get(tn)
        if not record:
            return None

        now = utc_now()
        events = [self.create_event(e, now=now) for e in record.get("events") or ()]
        events.sort(key=lambda e: e.timestamp, reverse=True)

        raw_status = record.get("status") or (events[0].status if events else "")
        status = TrackingStatus.coerce(raw_status)
        if status is TrackingStatus.UNKNOWN:
            status = self.map_status(raw_status)

        return TrackingInfo(
            tracking_number=tn,
            carrier=self.name,
            status=status,
            location=clean_text(record.get("location")) or (events[0].location if events else None),
            timestamp=events[0].timestamp if events else now,
            description=clean_text(record.get("description")) or (events[0].description if events else None),
            events=tuple(events),
            source="mock",
        )

    @abstractmethod
    def track(self, tracking_number: str) -> TrackingInfo:
        """Live lookup. Raises CarrierApiError (or a subclass) on any failure."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(carrier={self.name!r}, available={self.is_available()})"
