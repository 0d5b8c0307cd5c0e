from __future__ import annotations

from fastapi.testclient import TestClient

from automart.app import app
from automart.behavior.store import get_behavior_store

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_feedback_records_positive():
    _login_user(client)
    resp = client.post("/recommendations/feedback", json={"car_id": 4, "is_positive": True})
    assert resp.status_code == 200
    assert resp.json() == {"status": "recorded", "total_feedback": 1}
    feedback = get_behavior_store().fetch_user_behavior(1).feedback
    assert feedback.makes == {"Hyundai": 1}
    assert feedback.body_types == {"SUV": 1}


def test_feedback_records_negative():
    _login_user(client)
    resp = client.post("/recommendations/feedback", json={"car_id": 4, "is_positive": False})
    assert resp.status_code == 200
    assert resp.json()["status"] == "recorded"
    assert get_behavior_store().fetch_user_behavior(1).feedback.makes == {"Hyundai": -1}


def test_feedback_unknown_car():
    _login_user(client)
    resp = client.post("/recommendations/feedback", json={"car_id": 9999, "is_positive": True})
    assert resp.status_code == 404


def test_feedback_validation_rejects_missing_flag():
    _login_user(client)
    resp = client.post("/recommendations/feedback", json={"car_id": 4})
    assert resp.status_code == 422


def test_disliked_make_drops_out_of_recommendations():
    _login_user(client)
    client.post("/behavior/views", json={"car_id": 3})  # Honda Accord
    for _ in range(3):
        client.post("/recommendations/feedback", json={"car_id": 12, "is_positive": False})
    body = client.get("/recommendations").json()
    # Honda now nets -1, so no make filter applies and the list widens
    assert body["is_default"] is False
    assert body["preferences"]["makes"] == {"Honda": -1}
    assert len({item["car"]["make"] for item in body["results"]}) > 1


def test_feedback_stats():
    _login_user(client)
    client.post("/recommendations/feedback", json={"car_id": 1, "is_positive": True})
    client.post("/recommendations/feedback", json={"car_id": 2, "is_positive": True})
    client.post("/recommendations/feedback", json={"car_id": 3, "is_positive": False})
    _login_admin(client)
    resp = client.get("/feedback/stats")
    body = resp.json()
    assert body["total"] == 3
    assert body["positive"] == 2
    assert body["negative"] == 1
    assert body["satisfaction_rate"] == 66.7
