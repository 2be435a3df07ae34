from __future__ import annotations

from typing import Optional


class TrackingError(RuntimeError):
    """Base class for everything raised by carrier_tracking."""


class ConfigError(TrackingError):
    """Raised when a carrier configuration file cannot be read or parsed."""


class UnsupportedCarrierError(TrackingError):
    """Tracking number matches no known carrier format (client input problem)."""

    def __init__(self, tracking_number: str) -> None:
        super().__init__(f"Unsupported carrier for tracking number: {tracking_number!r}")
        self.tracking_number = tracking_number


# Older name kept for callers that think in terms of detection.
DetectionError = UnsupportedCarrierError


class ProviderNotFoundError(TrackingError):
    """A carrier was detected but the registry holds no provider for it."""

    def __init__(self, carrier: str) -> None:
        super().__init__(f"Carrier provider not found: {carrier}")
        self.carrier = carrier


class ProviderInitializationError(TrackingError):
    """A real provider could not be set up; the registry substitutes a mock."""

    def __init__(self, carrier: str, message: str) -> None:
        super().__init__(f"{carrier} provider initialization failed: {message}")
        self.carrier = carrier


class CarrierApiError(TrackingError):
    """Any failure talking to a carrier. Always contained by the resolver."""

    def __init__(self, carrier: str, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"{carrier} tracking failed: {message}")
        self.carrier = carrier
        self.status_code = status_code


class CarrierTimeoutError(CarrierApiError):
    pass


class CarrierNetworkError(CarrierApiError):
    pass


class CarrierUnavailableError(CarrierApiError):
    """Carrier answered but refused service for now (e.g. HTTP 429)."""


class TrackingNotFoundError(CarrierApiError):
    pass


class CarrierResponseError(CarrierApiError):
    """Response could not be parsed into tracking events."""


class GeographicRestrictionError(CarrierApiError):
    """USPS Web Tools refuses requests from outside its service regions."""


__all__ = [
    "TrackingError",
    "ConfigError",
    "UnsupportedCarrierError",
    "DetectionError",
    "ProviderNotFoundError",
    "ProviderInitializationError",
    "CarrierApiError",
    "CarrierTimeoutError",
    "CarrierNetworkError",
    "CarrierUnavailableError",
    "TrackingNotFoundError",
    "CarrierResponseError",
    "GeographicRestrictionError",
]
