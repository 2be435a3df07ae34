from __future__ import annotations

import datetime as dt
import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from carrier_tracking.detection import normalize_tracking_number
from carrier_tracking.models import TrackingInfo, TrackingStatus
from carrier_tracking.utils.timestamps import coerce_timestamp, utc_now

from .resolver import TrackingResolver

DEFAULT_FRESHNESS = dt.timedelta(hours=2)


@dataclass
class TrackingHistoryStore:
    """Append-only tracking history, optionally persisted as a JSON array.

    File shape on disk:
        [
          {"trackingNumber": ..., "carrier": ..., "status": ..., "location": ...,
           "timestamp": ..., "description": ..., "userId": ..., "createdAt": ...},
          ...
        ]
    With `path=None` the store lives in memory only.
    """

    path: Optional[Path] = None
    logger: Optional[logging.Logger] = None
    _records: List[Dict[str, Any]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path) if self.path else None
        self.logger = self.logger or logging.getLogger("carrier_tracking.services.history")
        self._lock = threading.Lock()
        self._records = self._read_file()

    def _read_file(self) -> List[Dict[str, Any]]:
        if self.path is None or not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as ex:
            self.logger.warning("Ignoring unreadable history file %s: %s", self.path, ex)
            return []
        return [r for r in data if isinstance(r, dict)] if isinstance(data, list) else []

    def _persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            json.dump(self._records, fh, ensure_ascii=False, indent=2)

    def append(self, info: TrackingInfo, user_id: Optional[str] = None) -> Dict[str, Any]:
        record = {
            "trackingNumber": info.tracking_number,
            "carrier": info.carrier,
            "status": info.status.value,
            "location": info.location,
            "timestamp": info.timestamp.isoformat(),
            "description": info.description,
            "userId": user_id,
            "createdAt": utc_now().isoformat(),
        }
        with self._lock:
            self._records.append(record)
            self._persist()
        return record

    def latest(self, tracking_number: str, user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Most recent record (by timestamp) for a number; scoped to `user_id` when given."""
        tn = normalize_tracking_number(tracking_number)
        with self._lock:
            matches = [
                r for r in self._records
                if r.get("trackingNumber") == tn and (user_id is None or r.get("userId") == user_id)
            ]
        if not matches:
            return None
        return max(matches, key=lambda r: coerce_timestamp(r.get("timestamp")))

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [r for r in self._records if r.get("userId") == user_id]
        return sorted(rows, key=lambda r: coerce_timestamp(r.get("timestamp")), reverse=True)


def info_from_record(record: Dict[str, Any]) -> TrackingInfo:
    """Rebuild a single-event TrackingInfo from a stored history row."""
    return TrackingInfo(
        tracking_number=record.get("trackingNumber") or "",
        carrier=record.get("carrier") or "",
        status=TrackingStatus.coerce(record.get("status")),
        location=record.get("location"),
        timestamp=coerce_timestamp(record.get("timestamp")),
        description=record.get("description"),
        source="cache",
    )


class CachedTracker:
    """Serve a recent history record when fresh, otherwise resolve and record.

    Lookup order: the user's own history, then anyone's history. A record is
    fresh when its timestamp falls inside `freshness` of now.
    """

    def __init__(self, resolver: TrackingResolver, store: TrackingHistoryStore,
                 *, freshness: dt.timedelta = DEFAULT_FRESHNESS,
                 logger: Optional[logging.Logger] = None) -> None:
        self.resolver = resolver
        self.store = store
        self.freshness = freshness
        self.logger = logger or logging.getLogger("carrier_tracking.services.history")

    def track(self, tracking_number: str, user_id: Optional[str] = None) -> TrackingInfo:
        tn = normalize_tracking_number(tracking_number)

        cached = self.store.latest(tn, user_id) if user_id is not None else None
        if cached is None:
            cached = self.store.latest(tn)

        if cached is not None:
            ts = coerce_timestamp(cached.get("timestamp"))
            if ts > utc_now() - self.freshness:
                self.logger.debug("Cache hit for %s (timestamp=%s)", tn, ts.isoformat())
                return info_from_record(cached)

        info = self.resolver.track(tn)
        if user_id is not None:
            self.store.append(info, user_id)
        return info


__all__ = ["CachedTracker", "DEFAULT_FRESHNESS", "TrackingHistoryStore", "info_from_record"]
