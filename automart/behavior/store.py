"""
Per-user behavior storage.

The store is optional analytics: recommendations must keep working when
it is switched off.  Instead of silently handing out empty records, a
disabled store raises ``BehaviorStoreUnavailable`` so callers can tell
"no data for this user" apart from "store unavailable".
"""
from __future__ import annotations

import logging
import os
import threading
import time
from typing import Protocol

from ..inventory.models import Car
from ..recommendations.config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from ..recommendations.preferences import price_bucket
from .models import BehaviorRecord, SearchEntry, SearchFilters, ViewedCar

logger = logging.getLogger(__name__)


class BehaviorStoreUnavailable(RuntimeError):
    pass


class BehaviorStore(Protocol):
    available: bool

    def fetch_user_behavior(self, user_id: int) -> BehaviorRecord | None: ...

    def record_view(self, user_id: int, car: Car, duration_seconds: float = 0.0) -> BehaviorRecord: ...

    def record_search(self, user_id: int, query: str, filters: SearchFilters) -> BehaviorRecord: ...

    def record_feedback(self, user_id: int, car: Car, is_positive: bool) -> BehaviorRecord: ...

    def clear(self) -> None: ...


class InMemoryBehaviorStore:
    available = True

    def __init__(self, config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG) -> None:
        self._config = config
        self._records: dict[int, BehaviorRecord] = {}
        self._lock = threading.Lock()

    def fetch_user_behavior(self, user_id: int) -> BehaviorRecord | None:
        with self._lock:
            record = self._records.get(user_id)
            return record.model_copy(deep=True) if record else None

    def _mutate(self, user_id: int, update) -> BehaviorRecord:
        with self._lock:
            record = self._records.setdefault(user_id, BehaviorRecord(user_id=user_id))
            update(record)
            record.revision += 1
            record.updated_at = time.time()
            return record.model_copy(deep=True)

    def record_view(self, user_id: int, car: Car, duration_seconds: float = 0.0) -> BehaviorRecord:
        viewed = ViewedCar(
            car_id=car.id,
            make=car.make,
            model=car.model,
            year=car.year,
            price=car.price,
            body_type=car.body_type,
            color=car.color,
            duration_seconds=duration_seconds,
        )

        def update(record: BehaviorRecord) -> None:
            record.viewed_cars.append(viewed)
            # Ring buffer: keep only the most recent views
            del record.viewed_cars[: -self._config.max_viewed_cars]

        return self._mutate(user_id, update)

    def record_search(self, user_id: int, query: str, filters: SearchFilters) -> BehaviorRecord:
        entry = SearchEntry(query=query, filters=filters)

        def update(record: BehaviorRecord) -> None:
            record.searches.append(entry)
            del record.searches[: -self._config.max_searches]

        return self._mutate(user_id, update)

    def record_feedback(self, user_id: int, car: Car, is_positive: bool) -> BehaviorRecord:
        delta = 1 if is_positive else -1

        def update(record: BehaviorRecord) -> None:
            # Not clamped: repeated dislikes push weights below zero
            prefs = record.feedback
            prefs.bump("makes", car.make, delta)
            prefs.bump("body_types", car.body_type, delta)
            prefs.bump("price_ranges", price_bucket(car.price, self._config.price_bucket_size), delta)
            prefs.bump("years", car.year, delta)

        return self._mutate(user_id, update)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class UnavailableBehaviorStore:
    available = False

    def __init__(self, reason: str = "behavior store disabled") -> None:
        self.reason = reason

    def _fail(self):
        raise BehaviorStoreUnavailable(self.reason)

    def fetch_user_behavior(self, user_id: int) -> BehaviorRecord | None:
        self._fail()

    def record_view(self, user_id: int, car: Car, duration_seconds: float = 0.0) -> BehaviorRecord:
        self._fail()

    def record_search(self, user_id: int, query: str, filters: SearchFilters) -> BehaviorRecord:
        self._fail()

    def record_feedback(self, user_id: int, car: Car, is_positive: bool) -> BehaviorRecord:
        self._fail()

    def clear(self) -> None:
        pass


def _create_store() -> BehaviorStore:
    backend = os.environ.get("AUTOMART_BEHAVIOR_STORE", "memory").strip().lower()
    if backend == "disabled":
        logger.info("Behavior store disabled; personalization falls back to defaults")
        return UnavailableBehaviorStore()
    return InMemoryBehaviorStore()


_store: BehaviorStore = _create_store()


def get_behavior_store() -> BehaviorStore:
    return _store


def set_behavior_store(store: BehaviorStore) -> None:
    global _store
    _store = store
