from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type

from carrier_tracking.api.transport import RequestsTransport
from carrier_tracking.config.carriers import load_carrier_configs, minimal_carrier_config
from carrier_tracking.config.env import load_carrier_credentials
from carrier_tracking.config.logging_config import mask_secret
from carrier_tracking.detection import SUPPORTED_CARRIERS
from carrier_tracking.models import CarrierConfig, CarrierCredentials
from carrier_tracking.providers import PROVIDER_CLASSES, CarrierProvider

ConfigLoader = Callable[[], Mapping[str, CarrierConfig]]
CredentialsLoader = Callable[[], Mapping[str, CarrierCredentials]]
TransportFactory = Callable[[CarrierConfig], RequestsTransport]
ProviderClasses = Mapping[str, Tuple[Type[CarrierProvider], Type[CarrierProvider]]]


class RegistryState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class CarrierRegistry:
    """Owns one provider per supported carrier.

    Initialization is lazy (first `get()`), runs at most once, and is safe
    under concurrent first use: the first caller performs the
    configuration-load + provider-construction pass while every other caller
    waits on a condition until the registry is READY. The condition's lock
    is released while providers talk to the network.

    A carrier whose real provider cannot be constructed or initialized gets
    a mock fallback, so the supported set never depends on credentials.

    READY is final. The one way back to UNINITIALIZED is an unexpected
    error during the build pass itself (not a per-carrier failure, which
    falls back to a mock); the state is reset so that a later call retries
    instead of leaving waiters blocked on INITIALIZING.
    """

    def __init__(
        self,
        *,
        config_loader: Optional[ConfigLoader] = None,
        credentials_loader: Optional[CredentialsLoader] = None,
        provider_classes: Optional[ProviderClasses] = None,
        transport_factory: Optional[TransportFactory] = None,
        carriers: Tuple[str, ...] = SUPPORTED_CARRIERS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config_loader = config_loader or load_carrier_configs
        self._credentials_loader = credentials_loader or load_carrier_credentials
        self._provider_classes = provider_classes or PROVIDER_CLASSES
        self._transport_factory = transport_factory
        self._carriers = tuple(carriers)
        self.logger = logger or logging.getLogger("carrier_tracking.services.registry")

        self._providers: Dict[str, CarrierProvider] = {}
        self._configs: Dict[str, CarrierConfig] = {}
        self._state = RegistryState.UNINITIALIZED
        self._cond = threading.Condition()

    @property
    def state(self) -> RegistryState:
        return self._state

    # --- initialization ----------------------------------------------------

    def initialize(self) -> None:
        with self._cond:
            while self._state is RegistryState.INITIALIZING:
                self._cond.wait()
            if self._state is RegistryState.READY:
                return
            self._state = RegistryState.INITIALIZING

        try:
            configs, providers = self._build_providers()
        except BaseException:
            # Only reachable on programming errors; let a later call retry.
            with self._cond:
                self._state = RegistryState.UNINITIALIZED
                self._cond.notify_all()
            raise

        with self._cond:
            self._configs.update(configs)
            for carrier, provider in providers.items():
                # explicit register() calls made before initialization win
                self._providers.setdefault(carrier, provider)
            self._state = RegistryState.READY
            self._cond.notify_all()
        self.logger.info("CarrierRegistry ready: %s", ", ".join(self._providers))

    def _load_configs(self) -> Dict[str, CarrierConfig]:
        try:
            loaded = dict(self._config_loader())
        except Exception as ex:
            self.logger.error("Failed to load carrier configurations: %s", ex)
            loaded = {}
        for carrier in self._carriers:
            if carrier not in loaded:
                self.logger.warning("No configuration for %s; using minimal config", carrier)
                loaded[carrier] = minimal_carrier_config(carrier)
        return loaded

    def _load_credentials(self) -> Dict[str, CarrierCredentials]:
        try:
            return dict(self._credentials_loader())
        except Exception as ex:
            self.logger.error("Failed to load carrier credentials: %s", ex)
            return {}

    def _build_providers(self) -> Tuple[Dict[str, CarrierConfig], Dict[str, CarrierProvider]]:
        self.logger.info("Initializing CarrierRegistry...")
        configs = self._load_configs()
        credentials = self._load_credentials()

        providers: Dict[str, CarrierProvider] = {}
        for carrier in self._carriers:
            config = configs[carrier]
            creds = credentials.get(carrier) or CarrierCredentials()
            providers[carrier] = self._build_provider(carrier, config, creds)
        return configs, providers

    def _build_provider(self, carrier: str, config: CarrierConfig,
                        creds: CarrierCredentials) -> CarrierProvider:
        real_cls, mock_cls = self._provider_classes[carrier]
        self.logger.debug(
            "%s credentials: client_id=%s api_key=%s user_id=%s",
            carrier, mask_secret(creds.client_id), mask_secret(creds.api_key),
            mask_secret(creds.user_id),
        )
        try:
            transport = self._transport_factory(config) if self._transport_factory else None
            provider = real_cls(config, creds, transport)
            provider.initialize()
            self.logger.info("%s provider registered (live API)", carrier)
            return provider
        except Exception as ex:
            self.logger.warning("%s provider initialization failed: %s", carrier, ex)
            self.logger.info("%s will use mock data", carrier)
            mock_config = config.as_mock()
            transport = self._transport_factory(mock_config) if self._transport_factory else None
            return mock_cls(mock_config, CarrierCredentials(), transport)

    def _ensure_ready(self) -> None:
        if self._state is not RegistryState.READY:
            self.initialize()

    # --- public API --------------------------------------------------------

    def register(self, carrier: str, provider: CarrierProvider) -> None:
        with self._cond:
            self._providers[carrier] = provider
            self._configs.setdefault(carrier, provider.config)
        self.logger.debug("Registered carrier: %s (%s)", carrier, type(provider).__name__)

    def get(self, carrier: str) -> Optional[CarrierProvider]:
        self._ensure_ready()
        return self._providers.get(carrier)

    def get_all(self) -> Dict[str, CarrierProvider]:
        self._ensure_ready()
        return dict(self._providers)

    def is_supported(self, carrier: str) -> bool:
        self._ensure_ready()
        return carrier in self._providers

    def get_supported_carriers(self) -> List[str]:
        self._ensure_ready()
        return list(self._providers)

    def get_config(self, carrier: str) -> Optional[CarrierConfig]:
        self._ensure_ready()
        return self._configs.get(carrier)

    def carrier_info(self, carrier: str) -> Optional[Dict[str, Any]]:
        provider = self.get(carrier)
        if provider is None:
            return None
        return {
            "name": provider.name,
            "isAvailable": provider.is_available(),
            "hasApi": bool(provider.config.api_endpoint),
            "hasMockData": bool(provider.config.mock_data),
        }


_default_registry: Optional[CarrierRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> CarrierRegistry:
    """Process-wide registry, created on first use (not initialized until needed)."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = CarrierRegistry()
        return _default_registry


__all__ = ["CarrierRegistry", "RegistryState", "get_default_registry"]
