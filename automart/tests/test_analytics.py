from __future__ import annotations

from fastapi.testclient import TestClient

from automart.analytics.aggregator import compute_analytics
from automart.app import app

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_analytics_returns_empty_initially():
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_recommendations"] == 0
    assert body["total_searches"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["personalized_rate"] == 0.0


def test_analytics_tracks_recommendations():
    _login_user(client)
    client.post("/behavior/views", json={"car_id": 6})
    client.get("/recommendations", params={"priority": "family"})
    client.get("/recommendations", params={"priority": "family"})
    _login_admin(client)  # admin has no history
    client.get("/recommendations")
    body = client.get("/analytics").json()
    assert body["total_recommendations"] == 3
    assert body["personalized_rate"] == 66.7
    assert body["fallback_reasons"] == {"no_behavior": 1}
    assert body["priority_usage"] == {"family": 2, "none": 1}
    assert body["cache_stats"]["hits"] == 1


def test_analytics_tracks_search_and_comparison():
    _login_user(client)
    client.post("/search/advanced", json={"makes": ["Toyota", "Kia"]})
    client.post("/search/advanced", json={"makes": ["Toyota"]})
    client.post("/compare", json={"car_ids": [1, 6]})
    _login_admin(client)
    body = client.get("/analytics").json()
    assert body["total_searches"] == 2
    assert body["ai_enhanced_searches"] == 0
    assert body["top_searched_makes"][0] == {"name": "Toyota", "count": 2}
    assert body["total_comparisons"] == 1


def test_compute_analytics_from_raw_events():
    events = [
        {"type": "recommendation", "personalized": True, "response_time_ms": 10.0},
        {"type": "recommendation", "personalized": False, "fallback_reason": "error",
         "response_time_ms": 30.0},
        {"type": "search", "makes": [], "ai_enhanced": True},
    ]
    result = compute_analytics(events)
    assert result["avg_response_time_ms"] == 20.0
    assert result["personalized_rate"] == 50.0
    assert result["fallback_reasons"] == {"error": 1}
    assert result["ai_enhanced_searches"] == 1
