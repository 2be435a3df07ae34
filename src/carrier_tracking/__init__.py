# src/carrier_tracking/__init__.py
from .detection import detect_carrier, is_valid_tracking_number
from .errors import ProviderNotFoundError, UnsupportedCarrierError
from .models import TrackingEvent, TrackingInfo, TrackingStatus
from .services.registry import CarrierRegistry, get_default_registry
from .services.resolver import TrackingResolver

__all__ = [
    "CarrierRegistry",
    "ProviderNotFoundError",
    "TrackingEvent",
    "TrackingInfo",
    "TrackingResolver",
    "TrackingStatus",
    "UnsupportedCarrierError",
    "detect_carrier",
    "get_default_registry",
    "is_valid_tracking_number",
]
