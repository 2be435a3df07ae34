# tests/unit/test_detection.py
import pytest

from carrier_tracking.detection import (
    CARRIER_PATTERNS,
    SUPPORTED_CARRIERS,
    detect_carrier,
    is_valid_tracking_number,
    matching_carriers,
    normalize_tracking_number,
    pattern_for,
)


@pytest.mark.parametrize("tn,carrier", [
    ("1Z999AA1234567890", "UPS"),
    ("1Z1234567890123456", "UPS"),
    ("123456789012", "FedEx"),
    ("1234567890123", "FedEx"),
    ("12345678901234", "FedEx"),
    ("9400100000000000000000", "USPS"),
    ("9205500000000000000000", "USPS"),
    ("9405508106244021621495", "USPS"),
    ("9400100000000000000", "USPS"),
])
def test_detect_known_formats(tn, carrier):
    assert detect_carrier(tn) == carrier
    assert is_valid_tracking_number(tn) is True


@pytest.mark.parametrize("tn", ["INVALID123", "", "123", "   ", None, "1Z12", "12345678901",
                                "94001000000000000000000", "8400100000000000000000"])
def test_detect_returns_none_for_unknown(tn):
    assert detect_carrier(tn) is None
    assert is_valid_tracking_number(tn) is False


def test_detect_ignores_whitespace_and_case():
    assert detect_carrier(" 1Z999AA1234567890 ") == "UPS"
    assert detect_carrier("1z999aa1234567890") == "UPS"
    assert detect_carrier("\t123456789012\n") == "FedEx"


def test_normalize_tracking_number():
    assert normalize_tracking_number("  1z999aa1234567890 ") == "1Z999AA1234567890"
    assert normalize_tracking_number(None) == ""


def test_detect_is_deterministic():
    results = {detect_carrier("9400100000000000000000") for _ in range(20)}
    assert results == {"USPS"}


def test_priority_order_is_declaration_order():
    assert SUPPORTED_CARRIERS == ("UPS", "FedEx", "USPS")
    assert [c for c, _ in CARRIER_PATTERNS] == list(SUPPORTED_CARRIERS)


def _samples():
    # every length each pattern could plausibly touch, digits and 1Z forms
    out = []
    for n in range(8, 25):
        out.append("1" * n)
        out.append("9" * n)
        out.append("1Z" + "A" * (n - 2))
        out.append("1Z" + "9" * (n - 2))
    return out


def test_patterns_are_mutually_exclusive():
    for tn in _samples():
        assert len(matching_carriers(tn)) <= 1, tn


def test_pattern_for_returns_detection_pattern():
    assert pattern_for("UPS").match("1Z999AA1234567890")
    assert pattern_for("DHL") is None
