from .registry import CarrierRegistry, RegistryState, get_default_registry
from .resolver import TrackingResolver
from .history import CachedTracker, TrackingHistoryStore

__all__ = [
    "CachedTracker",
    "CarrierRegistry",
    "RegistryState",
    "TrackingHistoryStore",
    "TrackingResolver",
    "get_default_registry",
]
