from .base import CarrierProvider
from .fedex import FedExProvider
from .mock import MockCarrierProvider, MockUPSProvider, synthetic_tracking_info
from .ups import UPSProvider
from .usps import USPSProvider

# carrier id -> (real provider class, mock fallback class)
PROVIDER_CLASSES = {
    "UPS": (UPSProvider, MockUPSProvider),
    "FedEx": (FedExProvider, MockCarrierProvider),
    "USPS": (USPSProvider, MockCarrierProvider),
}

__all__ = [
    "CarrierProvider",
    "FedExProvider",
    "MockCarrierProvider",
    "MockUPSProvider",
    "PROVIDER_CLASSES",
    "UPSProvider",
    "USPSProvider",
    "synthetic_tracking_info",
]
