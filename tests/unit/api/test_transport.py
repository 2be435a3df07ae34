import pytest
import requests

from carrier_tracking.api.transport import RequestsTransport


def test_transport_mounts_retrying_adapters():
    t = RequestsTransport(timeout=3, max_retries=2)
    adapter = t.session.get_adapter("https://example.test")
    assert adapter.max_retries.total == 2
    assert adapter.max_retries.raise_on_status is False
    assert t.timeout == 3


def test_transport_passes_default_timeout(monkeypatch):
    t = RequestsTransport(timeout=4)
    seen = {}

    def fake_request(method, url, **kwargs):
        seen.update(kwargs, method=method, url=url)
        raise requests.ConnectionError("boom")

    monkeypatch.setattr(t.session, "request", fake_request)
    with pytest.raises(requests.ConnectionError):
        t.post("https://example.test/x", json={"a": 1})
    assert seen["method"] == "POST"
    assert seen["timeout"] == 4
    assert seen["json"] == {"a": 1}


def test_transport_per_call_timeout_overrides(monkeypatch):
    t = RequestsTransport(timeout=4)
    seen = {}
    monkeypatch.setattr(t.session, "request",
                        lambda method, url, **kw: seen.update(kw) or "ok")
    assert t.get("https://example.test", timeout=1.5) == "ok"
    assert seen["timeout"] == 1.5
