from __future__ import annotations

import logging
import time

from pydantic import BaseModel, Field, model_validator

from ..analytics.store import record_event
from ..behavior.models import SearchFilters
from ..behavior.store import BehaviorStore, BehaviorStoreUnavailable, get_behavior_store
from ..inventory.data_store import fetch_candidates
from ..inventory.models import CandidateCriteria, Car
from ..llm.groq_client import rank_cars

logger = logging.getLogger(__name__)


class AdvancedSearchRequest(BaseModel):
    price_min: float | None = Field(default=None, ge=0)
    price_max: float | None = Field(default=None, ge=0)
    makes: list[str] = Field(default_factory=list)
    body_types: list[str] = Field(default_factory=list)
    years: list[int] = Field(default_factory=list)
    query: str | None = Field(default=None, max_length=500)
    personality_traits: list[str] = Field(default_factory=list)
    limit: int = Field(default=20, ge=1, le=100)

    @model_validator(mode="after")
    def _check_price_range(self) -> AdvancedSearchRequest:
        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_min > self.price_max
        ):
            raise ValueError("price_min must not exceed price_max")
        return self


class AdvancedSearchResponse(BaseModel):
    results: list[Car]
    count: int
    ai_enhanced: bool = False
    ai_ranked: bool = False


def _single(values: list):
    return values[0] if len(values) == 1 else None


def _to_filters(request: AdvancedSearchRequest) -> SearchFilters:
    return SearchFilters(
        make=_single(request.makes),
        body_type=_single(request.body_types),
        year=_single(request.years),
        min_price=request.price_min,
        max_price=request.price_max,
    )


def _filter(request: AdvancedSearchRequest) -> list[Car]:
    cars = fetch_candidates(CandidateCriteria(
        price_min=request.price_min,
        price_max=request.price_max,
    ))
    if request.makes:
        makes = {m.strip().lower() for m in request.makes}
        cars = [c for c in cars if c.make.lower() in makes]
    if request.body_types:
        body_types = {b.strip().lower() for b in request.body_types}
        cars = [c for c in cars if (c.body_type or "").lower() in body_types]
    if request.years:
        years = set(request.years)
        cars = [c for c in cars if c.year in years]
    return cars


def advanced_search(
    request: AdvancedSearchRequest,
    user_id: int | None = None,
    store: BehaviorStore | None = None,
) -> AdvancedSearchResponse:
    start_time = time.time()
    cars = _filter(request)

    ai_enhanced = bool(request.query or request.personality_traits)
    ai_ranked = False
    if ai_enhanced and cars:
        ranking = rank_cars(request.query, request.personality_traits, cars)
        if ranking:
            by_id = {c.id: c for c in cars}
            ranked = [by_id[car_id] for car_id in ranking]
            ranked_ids = set(ranking)
            cars = ranked + [c for c in cars if c.id not in ranked_ids]
            ai_ranked = True

    if user_id is not None:
        store = store or get_behavior_store()
        try:
            store.record_search(user_id, request.query or "", _to_filters(request))
        except BehaviorStoreUnavailable:
            logger.warning("Behavior store unavailable, search history not saved for user %s", user_id)

    results = cars[:request.limit]
    record_event("search", {
        "user_id": user_id,
        "makes": request.makes,
        "body_types": request.body_types,
        "ai_enhanced": ai_enhanced,
        "ai_ranked": ai_ranked,
        "results_returned": len(results),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })

    return AdvancedSearchResponse(
        results=results,
        count=len(cars),
        ai_enhanced=ai_enhanced,
        ai_ranked=ai_ranked,
    )

