import json

import pytest
import requests

from carrier_tracking.config.carriers import load_carrier_config


def _make_response(status=200, *, json_body=None, text=None, reason=None):
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason or ("OK" if status < 400 else "Error")
    resp.encoding = "utf-8"
    if json_body is not None:
        resp._content = json.dumps(json_body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    else:
        resp._content = (text or "").encode("utf-8")
    return resp


class FakeTransport:
    """Stands in for RequestsTransport: replays queued responses/exceptions, records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method.upper(), "url": url, **kwargs})
        item = self.responses.pop(0) if self.responses else _make_response(500)
        if isinstance(item, BaseException):
            raise item
        return item

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture(autouse=True)
def _no_endpoint_overrides(monkeypatch):
    for name in ("UPS_API_ENDPOINT", "FEDEX_API_ENDPOINT", "USPS_API_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def carrier_config():
    return load_carrier_config
