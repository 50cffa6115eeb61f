import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.api import ai_routes
from app.api.deps import get_bing_client, get_gsc_client, get_narrative_provider
from app.config import settings
from app.connectors.http import ProviderAPIError
from app.database import get_session
from app.main import app
from conftest import FakeBing, FakeGSC, FakeNarrative, gsc_handler


@pytest.fixture
def client(engine, fake_gsc, fake_bing):
    def session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = session_override
    app.dependency_overrides[get_gsc_client] = lambda: fake_gsc
    app.dependency_overrides[get_bing_client] = lambda: fake_bing
    app.dependency_overrides[get_narrative_provider] = lambda: FakeNarrative()
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_site_inventory(client):
    body = client.get("/sites").json()
    assert body["bing_configured"] is True
    assert [m["site_id"] for m in body["matched"]] == ["example.com"]
    assert [s["url"] for s in body["gsc_only"]] == ["https://other.org/"]
    assert [s["url"] for s in body["bing_only"]] == ["https://bing-only.net/"]
    assert "gsc_urls" not in body


def test_provider_site_lists(client):
    assert len(client.get("/sites/gsc").json()["sites"]) == 2
    assert len(client.get("/sites/bing").json()["sites"]) == 2


def test_bing_listing_requires_key(client):
    app.dependency_overrides[get_bing_client] = lambda: FakeBing([], {}, api_key="")
    response = client.get("/sites/bing")
    assert response.status_code == 400
    assert response.json()["error"] == "bing_not_configured"


def test_gsc_outage_maps_to_502(client):
    app.dependency_overrides[get_gsc_client] = lambda: FakeGSC(
        [], gsc_handler, list_error=ProviderAPIError("timed out", "gsc", unreachable=True)
    )
    response = client.get("/sites")
    assert response.status_code == 502
    assert response.json()["error"] == "upstream_unreachable"
    assert response.json()["provider"] == "gsc"


def test_generate_then_read_history(client):
    response = client.post(
        "/reports/generate", json={"site_id": "https://www.example.com/", "year": 2025, "month": 11}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["site_id"] == "example.com"
    assert body["saved"] is True
    assert body["narrative_status"] == "generated"
    assert body["summary"]["google"]["deltas"]["mom"]["clicks_delta_abs"] == 200

    history = client.get("/reports/history", params={"site_id": "example.com"}).json()
    assert history["count"] == 1
    assert history["reports"][0]["period"] == "2025-11"

    stored = client.get("/reports/example.com/2025-11")
    assert stored.status_code == 200
    assert stored.json()["report"]["summary"]["bing_clicks"] == 30


def test_generate_accepts_normalized_id_alias(client):
    response = client.post(
        "/reports/generate", json={"normalizedId": "example.com", "year": 2025, "month": 11}
    )
    assert response.status_code == 200


def test_generate_unknown_site(client):
    response = client.post(
        "/reports/generate", json={"site_id": "other.org", "year": 2025, "month": 11}
    )
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "site_not_found"
    assert body["missing"] == ["bing"]


def test_generate_validates_month(client):
    response = client.post(
        "/reports/generate", json={"site_id": "example.com", "year": 2025, "month": 13}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "validation_failed"


def test_generate_without_token(engine, monkeypatch):
    monkeypatch.setattr(settings, "gsc_access_token", "")
    response = TestClient(app).post(
        "/reports/generate", json={"site_id": "example.com", "year": 2025, "month": 11}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_missing_stored_report(client):
    response = client.get("/reports/example.com/2024-01")
    assert response.status_code == 404
    assert response.json()["error"] == "report_not_found"


def seo_payload(**overrides):
    payload = {
        "site": "example.com",
        "month": "2025-11",
        "google": {
            "current": {"clicks": 1000, "impressions": 20000, "ctr": 5.0, "position": 4.0},
            "previous": {"clicks": 800, "impressions": 25000, "ctr": 3.2, "position": 5.0},
            "last16Months": [
                {"month": "2025-11", "clicks": 1000, "impressions": 20000, "ctr": 5.0},
                {"month": "2025-10", "clicks": 800, "impressions": 25000, "ctr": 3.2},
            ],
        },
    }
    payload.update(overrides)
    return payload


def test_seo_report_narrates_supplied_metrics(client, monkeypatch):
    provider = FakeNarrative()
    monkeypatch.setattr(ai_routes, "select_provider", lambda name: ("fake", provider))

    response = client.post("/ai/seo-report", json=seo_payload())
    assert response.status_code == 200
    body = response.json()
    assert body["mode"] == "json"
    assert body["provider_used"] == "fake"
    assert body["pack"]["google"]["deltas"]["mom"]["clicks_delta_pct"] == pytest.approx(25.0)
    assert [p["month"] for p in body["pack"]["google"]["last_16_months"]] == ["2025-10", "2025-11"]
    assert body["pack"]["bing"] is None
    assert body["summary_cards"]["google"]["clicks"] == "1.0K"
    assert provider.packs[0]["month"] == "2025-11"


def test_seo_report_raw_text(client, monkeypatch):
    monkeypatch.setattr(
        ai_routes, "select_provider", lambda name: ("fake", FakeNarrative(response="Great month."))
    )
    body = client.post("/ai/seo-report", json=seo_payload()).json()
    assert body["mode"] == "raw"
    assert body["text"] == "Great month."


def test_seo_report_rejects_bad_month(client):
    response = client.post("/ai/seo-report", json=seo_payload(month="2025-13"))
    assert response.status_code == 422


def test_seo_report_unknown_provider(client):
    response = client.post("/ai/seo-report", json=seo_payload(provider="nope"))
    assert response.status_code == 400
    assert response.json()["error"] == "unknown_provider"


def test_seo_report_generation_failure(client, monkeypatch):
    monkeypatch.setattr(
        ai_routes,
        "select_provider",
        lambda name: ("fake", FakeNarrative(error=RuntimeError("quota"))),
    )
    response = client.post("/ai/seo-report", json=seo_payload())
    assert response.status_code == 502
    assert response.json()["error"] == "narrative_failed"


def test_history_accepts_site_id_alias(client):
    client.post("/reports/generate", json={"site_id": "example.com", "year": 2025, "month": 11})
    body = client.get("/reports/history", params={"siteId": "https://www.example.com/"}).json()
    assert body["count"] == 1


def test_history_requires_a_site(client):
    response = client.get("/reports/history")
    assert response.status_code == 422
    assert response.json()["error"] == "validation_failed"


def test_unexpected_error_body_carries_reason(client):
    def broken_provider():
        raise RuntimeError("boom")

    app.dependency_overrides[get_narrative_provider] = broken_provider
    response = TestClient(app, raise_server_exceptions=False).post(
        "/reports/generate", json={"site_id": "example.com", "year": 2025, "month": 11}
    )
    assert response.status_code == 500
    assert response.json() == {"error": "internal_error"}
