# tests/test_health_and_metrics.py
import httpx
from prometheus_client import REGISTRY
from fastapi.testclient import TestClient

from relay import monitoring
from relay.app import HEALTH_STATUS
from relay.db import ProcessLogStore


def test_health_returns_status(make_app, compute):
    with TestClient(make_app(compute())) as client:
        r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": HEALTH_STATUS}


def test_health_head(make_app, compute):
    with TestClient(make_app(compute())) as client:
        r = client.head("/health")
    assert r.status_code == 200
    assert r.content == b""


def test_health_ignores_dependencies(make_app, compute, tmp_path):
    # unreachable compute + a store whose directory does not exist
    upstream = compute(exc=httpx.ConnectError)
    broken = ProcessLogStore(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
    with TestClient(make_app(upstream, log_store=broken)) as client:
        r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": HEALTH_STATUS}
    assert upstream.calls == 0


def test_metrics_endpoint_returns_prometheus_format(make_app, compute, monkeypatch):
    monkeypatch.setattr(monitoring, "PROMETHEUS_ENABLED", True)
    with TestClient(make_app(compute())) as client:
        client.get("/calculate")
        r = client.get("/metrics")
    assert r.status_code == 200
    assert "text/plain" in r.headers.get("content-type", "")
    assert "relay_requests_total" in r.text
    assert "relay_last_process_number" in r.text


def test_metrics_disabled_returns_404(make_app, compute, monkeypatch):
    monkeypatch.setattr(monitoring, "PROMETHEUS_ENABLED", False)
    with TestClient(make_app(compute())) as client:
        r = client.get("/metrics")
    assert r.status_code == 404
    assert r.text == "Prometheus disabled"


def _failures(kind):
    return REGISTRY.get_sample_value("relay_failures_total", {"kind": kind}) or 0.0


def test_failures_are_counted(make_app, compute):
    before = _failures("upstream")
    with TestClient(make_app(compute(status_code=502))) as client:
        client.get("/calculate")
    after = _failures("upstream")
    assert after == before + 1
