"""Carrier detection from tracking-number format.

Patterns are tested in declaration order and the first match wins. The
three formats are disjoint (UPS numbers start with "1Z", FedEx numbers are
12-14 digits, USPS numbers are 19-22 digits starting with 9), so the order
only matters if a pattern is ever widened; tests assert the exclusivity.
"""
from __future__ import annotations

import re
from typing import List, Optional, Pattern, Tuple

CARRIER_PATTERNS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("UPS", re.compile(r"^1Z[0-9A-Z]{15,16}$")),
    ("FedEx", re.compile(r"^[0-9]{12,14}$")),
    ("USPS", re.compile(r"^9[0-9]{18,21}$")),
)

SUPPORTED_CARRIERS: Tuple[str, ...] = tuple(c for c, _ in CARRIER_PATTERNS)


def normalize_tracking_number(raw: Optional[str]) -> str:
    return str(raw or "").strip().upper()


def matching_carriers(raw: Optional[str]) -> List[str]:
    tn = normalize_tracking_number(raw)
    return [carrier for carrier, pattern in CARRIER_PATTERNS if pattern.match(tn)]


def detect_carrier(raw: Optional[str]) -> Optional[str]:
    tn = normalize_tracking_number(raw)
    if not tn:
        return None
    for carrier, pattern in CARRIER_PATTERNS:
        if pattern.match(tn):
            return carrier
    return None


def is_valid_tracking_number(raw: Optional[str]) -> bool:
    return detect_carrier(raw) is not None


def pattern_for(carrier: str) -> Optional[Pattern[str]]:
    for name, pattern in CARRIER_PATTERNS:
        if name == carrier:
            return pattern
    return None


__all__ = [
    "CARRIER_PATTERNS",
    "SUPPORTED_CARRIERS",
    "normalize_tracking_number",
    "matching_carriers",
    "detect_carrier",
    "is_valid_tracking_number",
    "pattern_for",
]
