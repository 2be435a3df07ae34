from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Pattern, Tuple

from .tracking import TrackingStatus


class AuthType(str, Enum):
    NONE = "none"
    BEARER = "bearer"
    OAUTH = "oauth"
    API_KEY = "api_key"
    BASIC = "basic"


# Credential fields that must all be non-empty for a provider to go live.
REQUIRED_CREDENTIALS: Mapping[AuthType, Tuple[str, ...]] = {
    AuthType.NONE: (),
    AuthType.OAUTH: ("client_id", "client_secret"),
    AuthType.BEARER: ("api_key",),
    AuthType.API_KEY: ("api_key",),
    AuthType.BASIC: ("username", "password"),
}

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class CarrierCredentials:
    api_key: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    user_id: Optional[str] = None

    def has(self, *names: str) -> bool:
        return all(bool((getattr(self, n, None) or "").strip()) for n in names)


@dataclass(frozen=True)
class CarrierConfig:
    """Static per-carrier configuration, read once at registry start-up."""

    name: str
    pattern: Pattern[str]
    auth_type: AuthType = AuthType.NONE
    api_endpoint: str = ""
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    retries: int = 0
    endpoints: Mapping[str, str] = field(default_factory=dict)
    # tracking number -> raw canned record (same shape as the JSON files)
    mock_data: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    # ordered (substring, status) pairs; first match wins
    status_mapping: Tuple[Tuple[str, TrackingStatus], ...] = ()

    def endpoint(self, key: str, default: str = "") -> str:
        return str(self.endpoints.get(key) or default)

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return self.api_endpoint.rstrip("/") + "/" + endpoint.lstrip("/")

    def as_mock(self) -> "CarrierConfig":
        """Copy used by mock fallback providers: same data, no auth, no endpoint."""
        return CarrierConfig(
            name=self.name,
            pattern=self.pattern,
            auth_type=AuthType.NONE,
            timeout=self.timeout,
            mock_data=self.mock_data,
            status_mapping=self.status_mapping,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, pattern: Optional[Pattern[str]] = None) -> "CarrierConfig":
        """Build from the JSON shape used by the files under config/carriers/.

        Keys are camelCase (`apiEndpoint`, `authType`, `mockData`,
        `statusMapping`). An explicit `pattern` argument wins over the
        file's `pattern` key.
        """
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("carrier config requires a name")

        if pattern is None:
            raw_pattern = data.get("pattern")
            if not raw_pattern:
                raise ValueError(f"carrier config for {name} requires a pattern")
            pattern = re.compile(str(raw_pattern))

        mapping = data.get("statusMapping") or {}
        status_mapping = tuple(
            (str(k).lower(), TrackingStatus.coerce(v)) for k, v in mapping.items()
        )

        timeout = data.get("timeout")
        return cls(
            name=name,
            pattern=pattern,
            auth_type=AuthType(str(data.get("authType") or "none").lower()),
            api_endpoint=str(data.get("apiEndpoint") or ""),
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT_SECONDS,
            retries=int(data.get("retries") or 0),
            endpoints=dict(data.get("endpoints") or {}),
            mock_data={str(k).strip().upper(): v for k, v in (
                data.get("mockData") or {}).items()},
            status_mapping=status_mapping,
        )
