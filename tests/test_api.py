"""HTTP contract tests for POST /api/audit."""
import pytest
from fastapi.testclient import TestClient

from auditapi.app import create_app
from auditapi.config import AuditSettings
from auditapi.core.devices import DeviceProfile
from auditapi.core.errors import EngineError
from auditapi.core.orchestrator import Orchestrator

from conftest import FakeEngine, RecordingSleep, make_lhr


def client_for(engine, **settings):
    orch = Orchestrator(AuditSettings(**settings), engine=engine, sleep=RecordingSleep())
    return TestClient(create_app(orch)), orch


def test_success_returns_audit_result():
    engine = FakeEngine(make_lhr(performance=0.93))
    client, _ = client_for(engine)

    resp = client.post("/api/audit", json={"url": "https://example.com", "device": "desktop"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["performance"] == 93
    assert body["bestPractices"] == 70
    assert body["metrics"] == {
        "firstContentfulPaint": 1.5,
        "largestContentfulPaint": 2.5,
        "totalBlockingTime": 124,
        "cumulativeLayoutShift": 0.05,
        "speedIndex": 3.2,
    }
    assert engine.calls == [("https://example.com", DeviceProfile.DESKTOP)]


def test_device_defaults_to_mobile():
    engine = FakeEngine(make_lhr())
    client, _ = client_for(engine)
    assert client.post("/api/audit", json={"url": "http://example.com"}).status_code == 200
    assert engine.calls[0][1] is DeviceProfile.MOBILE


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"device": "mobile"}, "URL is required"),
        ({"url": "", "device": "mobile"}, "URL is required"),
        ({"url": "not-a-url", "device": "mobile"}, "Invalid URL format. Please include http:// or https://"),
        ({"url": "ftp://example.com", "device": "mobile"}, "Invalid URL format. Please include http:// or https://"),
        ({"url": "http://exa mple.com", "device": "mobile"}, "Invalid URL format. Please include http:// or https://"),
        ({"url": "https://", "device": "desktop"}, "Invalid URL format. Please include http:// or https://"),
        ({"url": "https://example.com", "device": "tablet"}, "Device must be either mobile or desktop"),
        ({"url": "https://example.com", "device": None}, "Device must be either mobile or desktop"),
    ],
)
def test_validation_errors(payload, message):
    engine = FakeEngine(make_lhr())
    client, _ = client_for(engine)

    resp = client.post("/api/audit", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Validation Error", "message": message}
    assert engine.calls == []


def test_tablet_rejected_even_with_bad_url():
    engine = FakeEngine(make_lhr())
    client, _ = client_for(engine)
    resp = client.post("/api/audit", json={"url": "not-a-url", "device": "tablet"})
    assert resp.status_code == 400
    assert engine.calls == []


def test_malformed_body_is_validation_error():
    client, _ = client_for(FakeEngine(make_lhr()))
    resp = client.post("/api/audit", content=b"{nope", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Validation Error"


def test_exhausted_retries_return_500():
    engine = FakeEngine(EngineError("Missing required audit data for mobile"))
    client, orch = client_for(engine)

    resp = client.post("/api/audit", json={"url": "https://example.com", "device": "mobile"})

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Audit Error",
        "message": "mobile audit failed after 3 attempts: Missing required audit data for mobile",
    }
    assert len(engine.calls) == 3
    assert not orch.gate.held


def test_repeat_request_served_from_cache():
    engine = FakeEngine(make_lhr())
    client, _ = client_for(engine)
    payload = {"url": "https://example.com", "device": "mobile"}

    first = client.post("/api/audit", json=payload).json()
    second = client.post("/api/audit", json=payload).json()

    assert first == second
    assert len(engine.calls) == 1


def test_health_and_root():
    client, _ = client_for(FakeEngine(make_lhr()))
    assert client.get("/health").json() == {"status": "ok"}
    assert "ready" in client.get("/").json()["message"]


def test_error_responses_documented():
    client, _ = client_for(FakeEngine(make_lhr()))
    spec = client.get("/openapi.json").json()
    responses = spec["paths"]["/api/audit"]["post"]["responses"]
    for status in ("400", "500"):
        ref = responses[status]["content"]["application/json"]["schema"]["$ref"]
        assert ref.endswith("/ErrorResponse")
    assert set(spec["components"]["schemas"]["ErrorResponse"]["properties"]) == {"error", "message"}


def test_main_runs_uvicorn_on_configured_port(monkeypatch):
    from auditapi import app as app_module

    calls = []
    monkeypatch.setattr(app_module.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
    app_module.main()

    assert calls[0][0] is app_module.app
    assert calls[0][1]["port"] == app_module.PORT
    assert calls[0][1]["host"] == app_module.HOST
