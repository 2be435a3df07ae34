from .tracking import TrackingEvent, TrackingInfo, TrackingStatus
from .carrier import (
    AuthType,
    CarrierConfig,
    CarrierCredentials,
    REQUIRED_CREDENTIALS,
)

__all__ = [
    "AuthType",
    "CarrierConfig",
    "CarrierCredentials",
    "REQUIRED_CREDENTIALS",
    "TrackingEvent",
    "TrackingInfo",
    "TrackingStatus",
]
