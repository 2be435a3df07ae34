# tests/config/test_env.py

import os

import pytest

from carrier_tracking.config.env import (
    EnvError,
    credentials_from_env,
    endpoint_override,
    env as env_get,
    load_carrier_credentials,
    load_env,
)

CREDENTIAL_KEYS = (
    "UPS_CLIENT_ID", "UPS_CLIENT_SECRET", "UPS_API_KEY",
    "FEDEX_CLIENT_ID", "FEDEX_CLIENT_SECRET", "FEDEX_API_KEY",
    "USPS_WEB_TOOLS_USER_ID", "USPS_USER_ID",
)


def _write_env_file(dirpath, text=""):
    f = dirpath / ".env"
    f.write_text(text)
    return f


def _clear_keys(monkeypatch, *names):
    for n in names:
        monkeypatch.delenv(n, raising=False)


def test_load_env_reads_explicit_file(tmp_path, monkeypatch):
    _clear_keys(monkeypatch, "FEDEX_CLIENT_ID")
    f = _write_env_file(tmp_path, "FEDEX_CLIENT_ID=file_id\n")

    assert load_env(f) is True
    assert os.environ["FEDEX_CLIENT_ID"] == "file_id"
    monkeypatch.delenv("FEDEX_CLIENT_ID")


def test_process_env_wins_over_dotenv(tmp_path, monkeypatch):
    monkeypatch.setenv("FEDEX_CLIENT_ID", "process_id")
    f = _write_env_file(tmp_path, "FEDEX_CLIENT_ID=file_id\n")

    load_env(f, override=False)
    assert os.environ["FEDEX_CLIENT_ID"] == "process_id"


def test_missing_explicit_file_is_not_an_error(tmp_path):
    assert load_env(tmp_path / "nope.env") is False


def test_strict_mode_reports_missing_keys(tmp_path, monkeypatch):
    _clear_keys(monkeypatch, "UPS_CLIENT_ID")
    f = _write_env_file(tmp_path, "")
    with pytest.raises(EnvError, match="UPS_CLIENT_ID"):
        load_env(f, required_keys=("UPS_CLIENT_ID",), strict=True)


def test_env_accessor(monkeypatch):
    monkeypatch.setenv("CARRIER_TIMEOUT", "12")
    assert env_get("CARRIER_TIMEOUT", cast=int) == 12
    monkeypatch.delenv("CARRIER_TIMEOUT")
    assert env_get("CARRIER_TIMEOUT", default="x") == "x"
    with pytest.raises(KeyError):
        env_get("CARRIER_TIMEOUT", required=True)


def test_credentials_from_env(monkeypatch):
    _clear_keys(monkeypatch, *CREDENTIAL_KEYS)
    monkeypatch.setenv("UPS_CLIENT_ID", " ups-id ")
    monkeypatch.setenv("UPS_CLIENT_SECRET", "ups-secret")

    ups = credentials_from_env("UPS")
    assert ups.client_id == "ups-id"
    assert ups.has("client_id", "client_secret")
    assert ups.api_key is None
    assert not credentials_from_env("FedEx").has("client_id")


def test_usps_user_id_falls_back_to_short_name(monkeypatch):
    _clear_keys(monkeypatch, *CREDENTIAL_KEYS)
    monkeypatch.setenv("USPS_USER_ID", "legacy")
    assert credentials_from_env("USPS").user_id == "legacy"

    monkeypatch.setenv("USPS_WEB_TOOLS_USER_ID", "preferred")
    assert credentials_from_env("USPS").user_id == "preferred"


def test_load_carrier_credentials_covers_every_carrier(monkeypatch):
    _clear_keys(monkeypatch, *CREDENTIAL_KEYS)
    creds = load_carrier_credentials(use_dotenv=False)
    assert sorted(creds) == ["FedEx", "UPS", "USPS"]
    assert not any(c.has("client_id") for c in creds.values())


def test_endpoint_override(monkeypatch):
    assert endpoint_override("FedEx") is None
    monkeypatch.setenv("FEDEX_API_ENDPOINT", "https://apis.fedex.com")
    assert endpoint_override("FedEx") == "https://apis.fedex.com"
