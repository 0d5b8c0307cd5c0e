from __future__ import annotations

import pytest

from automart.behavior.models import SearchFilters
from automart.behavior.store import (
    BehaviorStoreUnavailable,
    InMemoryBehaviorStore,
    UnavailableBehaviorStore,
)
from automart.inventory.data_store import get_car
from automart.recommendations.config import RecommendationConfig


def test_unknown_user_has_no_record():
    assert InMemoryBehaviorStore().fetch_user_behavior(42) is None


def test_record_view_snapshots_car_and_bumps_revision():
    store = InMemoryBehaviorStore()
    store.record_view(1, get_car(1), duration_seconds=30)
    record = store.record_view(1, get_car(7))
    assert record.revision == 2
    assert [v.car_id for v in record.viewed_cars] == [1, 7]
    assert record.viewed_cars[0].make == "Toyota"
    assert record.viewed_cars[0].duration_seconds == 30


def test_view_history_is_capped_oldest_first():
    store = InMemoryBehaviorStore(RecommendationConfig(max_viewed_cars=3))
    for car_id in (1, 2, 3, 4, 5):
        store.record_view(1, get_car(car_id))
    record = store.fetch_user_behavior(1)
    assert [v.car_id for v in record.viewed_cars] == [3, 4, 5]


def test_search_history_is_capped():
    store = InMemoryBehaviorStore(RecommendationConfig(max_searches=2))
    for make in ("Toyota", "Honda", "Kia"):
        store.record_search(1, f"{make} deals", SearchFilters(make=make))
    record = store.fetch_user_behavior(1)
    assert [s.filters.make for s in record.searches] == ["Honda", "Kia"]


def test_dislikes_drive_weights_negative():
    store = InMemoryBehaviorStore()
    car = get_car(10)  # Ford Mustang 2019, 140000, Coupe
    for _ in range(3):
        store.record_feedback(1, car, is_positive=False)
    store.record_feedback(1, car, is_positive=True)
    feedback = store.fetch_user_behavior(1).feedback
    assert feedback.makes == {"Ford": -2}
    assert feedback.body_types == {"Coupe": -2}
    assert feedback.price_ranges == {140000: -2}
    assert feedback.years == {2019: -2}


def test_fetched_record_is_a_copy():
    store = InMemoryBehaviorStore()
    store.record_view(1, get_car(1))
    record = store.fetch_user_behavior(1)
    record.viewed_cars.clear()
    assert len(store.fetch_user_behavior(1).viewed_cars) == 1


def test_unavailable_store_raises_everywhere():
    store = UnavailableBehaviorStore()
    assert store.available is False
    with pytest.raises(BehaviorStoreUnavailable):
        store.fetch_user_behavior(1)
    with pytest.raises(BehaviorStoreUnavailable):
        store.record_view(1, get_car(1))
    with pytest.raises(BehaviorStoreUnavailable):
        store.record_feedback(1, get_car(1), True)
