from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, Optional


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def parse_timestamp(value: Any, formats: Iterable[str] = ()) -> Optional[dt.datetime]:
    """Best-effort parse of a carrier timestamp into an aware UTC datetime.

    Accepts datetime objects, ISO-8601 strings (a trailing ``Z`` is allowed)
    and any of the explicit strptime ``formats``. Returns None when nothing
    usable can be extracted; callers decide what to substitute.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return _as_utc(value)
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day, tzinfo=dt.timezone.utc)

    text = str(value).strip()
    if not text:
        return None

    iso = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        return _as_utc(dt.datetime.fromisoformat(iso))
    except ValueError:
        pass

    for fmt in formats:
        try:
            return _as_utc(dt.datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def coerce_timestamp(value: Any, *, default: Optional[dt.datetime] = None,
                     formats: Iterable[str] = ()) -> dt.datetime:
    """Like parse_timestamp but never returns None: falls back to `default` or now."""
    parsed = parse_timestamp(value, formats)
    if parsed is not None:
        return parsed
    return default if default is not None else utc_now()
