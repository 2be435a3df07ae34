from .normalize import RawEvent, build_tracking_info, join_location
from .transport import RequestsTransport

__all__ = [
    "RawEvent",
    "RequestsTransport",
    "build_tracking_info",
    "join_location",
]
