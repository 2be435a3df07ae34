# src/carrier_tracking/config/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from carrier_tracking.models import CarrierCredentials

try:
    # De facto standard for .env files
    from dotenv import load_dotenv, find_dotenv  # type: ignore
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "Missing dependency 'python-dotenv'. Install it with:\n"
        "  pip install python-dotenv"
    ) from e


# --- Public contract ---------------------------------------------------------

class EnvError(RuntimeError):
    """Raised when required environment variables are missing."""


# carrier id -> credential field -> env var names (first non-empty wins).
# The *_API_KEY values only take effect when the carrier's JSON config sets
# authType to "api_key" or "bearer"; the shipped UPS and FedEx configs use oauth.
CREDENTIAL_ENV_VARS: Mapping[str, Mapping[str, Tuple[str, ...]]] = {
    "UPS": {
        "client_id": ("UPS_CLIENT_ID",),
        "client_secret": ("UPS_CLIENT_SECRET",),
        "api_key": ("UPS_API_KEY",),
    },
    "FedEx": {
        "client_id": ("FEDEX_CLIENT_ID",),
        "client_secret": ("FEDEX_CLIENT_SECRET",),
        "api_key": ("FEDEX_API_KEY",),
    },
    "USPS": {
        "user_id": ("USPS_WEB_TOOLS_USER_ID", "USPS_USER_ID"),
    },
}


def load_project_dotenv(start: Optional[Path] = None, *, override: bool = False) -> Path:
    """
    Load variables from the nearest `.env` file (searching upward from `start` or CWD).
    Does NOT override existing env vars unless `override=True`.
    Returns the resolved Path to the .env file if found; otherwise Path().
    """
    start_path = Path.cwd() if start is None else Path(start)

    dotenv_str = find_dotenv(filename=".env", usecwd=True)
    dotenv_path = Path(dotenv_str) if dotenv_str else Path()

    if not dotenv_str:
        for p in (start_path, *start_path.parents):
            candidate = p / ".env"
            if candidate.exists():
                dotenv_path = candidate
                break

    if not dotenv_path.exists() or dotenv_path.is_dir():
        return Path()

    load_dotenv(dotenv_path=dotenv_path, override=override)
    return dotenv_path.resolve()


def env(name: str, *, default: Optional[str] = None, required: bool = False, cast=None):
    """
    Test-friendly accessor.

    - If `required=True` and var is missing, raise KeyError(name).
    - If `cast` is provided, apply it to the raw string and propagate cast errors.
    - Returns `default` when missing and not required.
    """
    raw = os.getenv(name)
    if raw is None:
        if required:
            raise KeyError(name)
        return default

    if cast is not None:
        return cast(raw)
    return raw


def load_env(
    dotenv_path: Optional[Path] = None,
    *,
    override: bool = False,
    required_keys: Tuple[str, ...] = (),
    strict: bool = False,
) -> bool:
    """
    Load a .env file into the process environment.

    - If `dotenv_path` is provided, load exactly that file (missing file is not an error).
    - Otherwise, auto-discover the nearest .env via `load_project_dotenv`.
    - If `strict=True`, every name in `required_keys` must be set afterwards;
      otherwise EnvError is raised.
    Returns True when a file was loaded.
    """
    loaded = False
    if dotenv_path:
        path = Path(dotenv_path)
        if path.is_file():
            load_dotenv(dotenv_path=path, override=override)
            loaded = True
    else:
        loaded = bool(load_project_dotenv(override=override).name)

    if strict and required_keys:
        missing = [k for k in required_keys if not os.getenv(k)]
        if missing:
            raise EnvError(
                f"Missing required environment variable(s): {', '.join(missing)}")
    return loaded


def _first_env(names: Tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def credentials_from_env(carrier: str) -> CarrierCredentials:
    """Read one carrier's secrets from the process environment (no .env loading)."""
    fields = CREDENTIAL_ENV_VARS.get(carrier, {})
    return CarrierCredentials(**{f: _first_env(names) for f, names in fields.items()})


def endpoint_override(carrier: str) -> Optional[str]:
    """`<CARRIER>_API_ENDPOINT`, e.g. FEDEX_API_ENDPOINT for production vs sandbox."""
    return _first_env((f"{carrier.upper()}_API_ENDPOINT",))


def load_carrier_credentials(
    dotenv_path: Path | str | None = None,
    *,
    use_dotenv: bool = True,
) -> Dict[str, CarrierCredentials]:
    """
    Load credentials for every known carrier.

    Existing process env always wins over values from the .env file. Pass
    `use_dotenv=False` to read only the process environment (useful for tests).
    """
    if use_dotenv:
        load_env(Path(dotenv_path) if dotenv_path else None, override=False)
    return {carrier: credentials_from_env(carrier) for carrier in CREDENTIAL_ENV_VARS}


__all__ = [
    "EnvError",
    "CREDENTIAL_ENV_VARS",
    "load_project_dotenv",
    "load_env",
    "env",
    "credentials_from_env",
    "endpoint_override",
    "load_carrier_credentials",
]
