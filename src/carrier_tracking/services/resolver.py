from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from carrier_tracking.detection import detect_carrier, normalize_tracking_number
from carrier_tracking.errors import ProviderNotFoundError, UnsupportedCarrierError
from carrier_tracking.models import TrackingInfo
from carrier_tracking.providers import CarrierProvider, synthetic_tracking_info

from .registry import CarrierRegistry, get_default_registry


class TrackingResolver:
    """Single entry point: detect the carrier, pick its provider, degrade on failure.

    Only structural problems raise (UnsupportedCarrierError,
    ProviderNotFoundError). A failing or unconfigured carrier yields mock
    data, or a synthetic "In Transit" record when no mock entry exists.
    """

    def __init__(self, registry: Optional[CarrierRegistry] = None, *,
                 logger: Optional[logging.Logger] = None) -> None:
        self.registry = registry or get_default_registry()
        self.logger = logger or logging.getLogger("carrier_tracking.services.resolver")

    def track(self, tracking_number: str) -> TrackingInfo:
        tn = normalize_tracking_number(tracking_number)
        carrier = detect_carrier(tn)
        if carrier is None:
            raise UnsupportedCarrierError(tn)

        provider = self.registry.get(carrier)
        if provider is None:
            self.logger.error("No provider registered for %s (registered: %s)",
                              carrier, ", ".join(self.registry.get_supported_carriers()))
            raise ProviderNotFoundError(carrier)

        self.logger.debug("Tracking %s via %s (available=%s)",
                          tn, type(provider).__name__, provider.is_available())

        if provider.is_available():
            try:
                return provider.track(tn)
            except Exception as ex:
                self.logger.warning("%s tracking error for %s: %s", carrier, tn, ex)
        else:
            self.logger.info("Using mock data for %s (no credentials)", carrier)

        return self._fallback(provider, tn)

    def _fallback(self, provider: CarrierProvider, tracking_number: str) -> TrackingInfo:
        mock = provider.get_mock_data(tracking_number)
        if mock is not None:
            self.logger.info("Falling back to mock data for %s", provider.name)
            return mock
        self.logger.info("No mock data for %s %s; returning synthetic record",
                         provider.name, tracking_number)
        return synthetic_tracking_info(tracking_number, provider.name)

    def get_supported_carriers(self) -> List[str]:
        return self.registry.get_supported_carriers()

    def is_carrier_supported(self, carrier: str) -> bool:
        return self.registry.is_supported(carrier)

    def carrier_info(self, carrier: str) -> Optional[Dict[str, Any]]:
        return self.registry.carrier_info(carrier)


__all__ = ["TrackingResolver"]
