# tests/config/test_carriers.py

import json

import pytest

from carrier_tracking.config.carriers import (
    load_carrier_config,
    load_carrier_configs,
    minimal_carrier_config,
)
from carrier_tracking.detection import pattern_for
from carrier_tracking.errors import ConfigError
from carrier_tracking.models import AuthType


@pytest.mark.parametrize("carrier,auth", [
    ("UPS", AuthType.OAUTH),
    ("FedEx", AuthType.OAUTH),
    ("USPS", AuthType.NONE),
])
def test_packaged_configs_load(carrier, auth):
    cfg = load_carrier_config(carrier)
    assert cfg.name == carrier
    assert cfg.auth_type is auth
    assert cfg.api_endpoint.startswith("https://")
    assert cfg.pattern is pattern_for(carrier)
    assert cfg.mock_data
    assert cfg.status_mapping


def test_endpoint_override_replaces_api_endpoint(monkeypatch):
    monkeypatch.setenv("FEDEX_API_ENDPOINT", "https://apis.fedex.com")
    cfg = load_carrier_config("FedEx")
    assert cfg.url_for(cfg.endpoint("track")) == "https://apis.fedex.com/track/v1/trackingnumbers"


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_carrier_config("UPS", tmp_path)


def test_invalid_json_raises_config_error(tmp_path):
    (tmp_path / "ups.json").write_text("{broken", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_carrier_config("UPS", tmp_path)


def test_unknown_carrier_raises():
    with pytest.raises(ConfigError):
        load_carrier_config("DHL")


def test_load_all_substitutes_minimal_config(tmp_path):
    (tmp_path / "usps.json").write_text(
        json.dumps({"name": "USPS", "authType": "none", "apiEndpoint": "https://x.test"}),
        encoding="utf-8",
    )
    configs = load_carrier_configs(config_dir=tmp_path)

    assert sorted(configs) == ["FedEx", "UPS", "USPS"]
    assert configs["USPS"].api_endpoint == "https://x.test"
    assert configs["UPS"].api_endpoint == ""
    assert configs["UPS"].mock_data == {}
    assert configs["UPS"].pattern is pattern_for("UPS")


def test_minimal_config_for_unknown_carrier():
    with pytest.raises(ConfigError):
        minimal_carrier_config("DHL")
