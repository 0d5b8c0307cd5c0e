from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from automart.app import app
from automart.comparison.compare import (
    advantages,
    compare_cars,
    comparison_table,
    disadvantages,
    value_score,
)
from automart.inventory.data_store import get_car
from automart.inventory.models import Car
from automart.recommendations.scoring import Priority

client = TestClient(app)


@pytest.fixture
def camry_and_corolla() -> list[Car]:
    return [get_car(1), get_car(7)]


def test_advantages_and_disadvantages(camry_and_corolla):
    camry, corolla = camry_and_corolla
    assert advantages(camry, camry_and_corolla) == [
        "Newer model than 1 other car",
        "Lower mileage than 1 other car",
        "More powerful engine (203 hp)",
        "Has 2 features missing from the Toyota Corolla",
    ]
    assert advantages(corolla, camry_and_corolla) == [
        "Cheaper than 1 other car",
        "Lower fuel consumption (5.9 L/100km)",
    ]
    assert "Lacks 2 features found on the Toyota Camry" in disadvantages(corolla, camry_and_corolla)
    assert "More expensive than 1 other car" in disadvantages(camry, camry_and_corolla)


def test_comparison_table_winners(camry_and_corolla):
    table = comparison_table(camry_and_corolla)
    assert table["price"].winner == 7
    assert table["year"].winner == 1
    assert table["mileage"].winner == 1
    assert table["fuel_consumption"].winner == 7
    assert table["transmission"].winner is None
    assert table["price"].values == {1: 95000, 7: 62000}


def test_comparison_table_skips_unknown_properties():
    cars = [
        Car(id=1, make="A", model="X", year=2020, price=50000),
        Car(id=2, make="B", model="Y", year=2021, price=60000),
    ]
    table = comparison_table(cars)
    assert "horsepower" not in table
    assert set(table) == {"price", "year"}


def test_value_score_favours_cheaper_equivalent():
    cheap = Car(id=1, make="A", model="X", year=2022, price=50000, mileage=20000)
    pricey = Car(id=2, make="B", model="Y", year=2022, price=100000, mileage=20000)
    cars = [cheap, pricey]
    assert value_score(cheap, cars, current_year=2024) > value_score(pricey, cars, current_year=2024)
    assert 0.0 <= value_score(pricey, cars, current_year=2024) <= 1.0


def test_clear_winner_recommendation(camry_and_corolla):
    result = compare_cars(camry_and_corolla)
    scores = {item.car.id: item.score for item in result.items}
    assert scores[1] == pytest.approx(0.65)
    assert scores[7] == pytest.approx(0.35)
    assert result.recommendation.startswith("We strongly recommend the Toyota Camry 2021")


def test_priority_changes_the_winner(camry_and_corolla):
    result = compare_cars(camry_and_corolla, Priority.fuel)
    assert result.recommendation.startswith(
        "We strongly recommend the Toyota Corolla 2020 for its fuel efficiency"
    )


def test_close_call_recommendation():
    civic = Car(id=1, make="Honda", model="Civic", year=2019, price=50000)
    mazda = Car(id=2, make="Mazda", model="3", year=2022, price=80000)
    result = compare_cars([civic, mazda])
    assert result.recommendation.startswith("The Honda Civic and the Mazda 3 score closely overall")
    assert "about 30,000 cheaper" in result.recommendation
    assert result.recommendation.endswith("before deciding.")


def test_compare_needs_two_to_four_cars():
    with pytest.raises(ValueError):
        compare_cars([get_car(1)])
    with pytest.raises(ValueError):
        compare_cars([get_car(i) for i in range(1, 6)])


# ── API ──────────────────────────────────────────────────────────────────


def test_compare_endpoint():
    resp = client.post("/compare", json={"car_ids": [1, 7, 11], "priority": "family"})
    assert resp.status_code == 200
    body = resp.json()
    assert [item["car"]["id"] for item in body["items"]] == [1, 7, 11]
    assert body["comparison"]["price"]["winner"] == 7
    assert body["recommendation"]


def test_compare_missing_cars_is_404():
    resp = client.post("/compare", json={"car_ids": [1, 9998, 9999]})
    assert resp.status_code == 404
    assert resp.json()["detail"]["missing_cars"] == [9998, 9999]


def test_compare_rejects_bad_id_lists():
    assert client.post("/compare", json={"car_ids": [1]}).status_code == 422
    assert client.post("/compare", json={"car_ids": [1, 2, 3, 4, 5]}).status_code == 422
    assert client.post("/compare", json={"car_ids": [1, 1]}).status_code == 422


def test_compare_uses_logged_in_preferences(store):
    c = TestClient(app)
    c.post("/auth/login", json={"username": "user", "password": "user123"})
    c.post("/behavior/views", json={"car_id": 3})  # Honda Accord
    anonymous = client.post("/compare", json={"car_ids": [3, 6]}).json()
    personal = c.post("/compare", json={"car_ids": [3, 6]}).json()
    assert personal["items"][0]["score"] > anonymous["items"][0]["score"]
