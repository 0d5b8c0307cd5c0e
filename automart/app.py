from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.feedback import feedback_summary, get_feedback, record_feedback
from .analytics.store import get_events, record_event
from .auth.dependencies import get_current_user, require_admin, require_user
from .auth.users import authenticate
from .behavior.models import (
    BehaviorRecord,
    FeedbackRequest,
    FeedbackResponse,
    SearchRequest,
    ViewRequest,
)
from .behavior.store import BehaviorStoreUnavailable, get_behavior_store
from .comparison.compare import CompareRequest, ComparisonResult, compare_cars
from .inventory.data_store import CarNotFound, get_car, get_dataframe
from .inventory.models import Car
from .recommendations.cache import get_cache_stats
from .recommendations.engine import (
    get_default_recommendations,
    get_personalized_recommendations,
)
from .recommendations.models import LoginRequest, RecommendationResponse
from .recommendations.preferences import extract_preferences
from .recommendations.scoring import Priority
from .search.advanced import AdvancedSearchRequest, AdvancedSearchResponse, advanced_search

app = FastAPI(title="AutoMart Recommendation API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "automart-secret-change-in-production"),
)


def _lookup_car(car_id: int) -> Car:
    try:
        return get_car(car_id)
    except CarNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _store_unavailable(exc: BehaviorStoreUnavailable) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Behavior store unavailable: {exc}")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    store = "ok" if get_behavior_store().available else "unavailable"
    return {"status": "ok", "behavior_store": store}


@app.get("/metadata")
def metadata() -> dict:
    df = get_dataframe()
    available = df.loc[df["status"] == "available"]
    return {
        "makes": sorted(available["make"].dropna().unique().tolist()),
        "body_types": sorted(available["body_type"].dropna().unique().tolist()),
        "priorities": [p.value for p in Priority],
        "year_range": {
            "min": int(available["year"].min()),
            "max": int(available["year"].max()),
        } if not available.empty else None,
        "price_range": {
            "min": int(available["price"].min()),
            "max": int(available["price"].max()),
        } if not available.empty else None,
    }


@app.get("/cars/{car_id}", response_model=Car)
def car_detail(car_id: int) -> Car:
    return _lookup_car(car_id)


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Recommendations ──────────────────────────────────────────────────────


@app.get("/recommendations", response_model=RecommendationResponse)
def recommendations(
    limit: int = Query(default=12, ge=1, le=50),
    priority: Priority | None = None,
    user: dict | None = Depends(get_current_user),
) -> RecommendationResponse:
    # Anonymous visitors get the market-wide picks
    if not user:
        return get_default_recommendations(limit)
    return get_personalized_recommendations(user["id"], limit, priority)


@app.get("/recommendations/default", response_model=RecommendationResponse)
def default_recommendations(
    limit: int = Query(default=12, ge=1, le=50),
) -> RecommendationResponse:
    return get_default_recommendations(limit)


@app.post("/recommendations/feedback", response_model=FeedbackResponse)
def recommendation_feedback(
    body: FeedbackRequest,
    user: dict = Depends(require_user),
) -> FeedbackResponse:
    car = _lookup_car(body.car_id)
    try:
        get_behavior_store().record_feedback(user["id"], car, body.is_positive)
    except BehaviorStoreUnavailable as exc:
        raise _store_unavailable(exc) from exc
    record_feedback(user["id"], car.id, body.is_positive)
    return FeedbackResponse(status="recorded", total_feedback=len(get_feedback()))


# ── Behavior tracking ────────────────────────────────────────────────────


@app.post("/behavior/views")
def track_view(body: ViewRequest, user: dict = Depends(require_user)) -> dict:
    car = _lookup_car(body.car_id)
    try:
        record = get_behavior_store().record_view(user["id"], car, body.duration_seconds)
    except BehaviorStoreUnavailable as exc:
        raise _store_unavailable(exc) from exc
    return {"status": "recorded", "revision": record.revision}


@app.post("/behavior/searches")
def track_search(body: SearchRequest, user: dict = Depends(require_user)) -> dict:
    try:
        record = get_behavior_store().record_search(user["id"], body.query, body.filters)
    except BehaviorStoreUnavailable as exc:
        raise _store_unavailable(exc) from exc
    return {"status": "recorded", "revision": record.revision}


@app.get("/behavior/me", response_model=BehaviorRecord)
def my_behavior(user: dict = Depends(require_user)) -> BehaviorRecord:
    try:
        record = get_behavior_store().fetch_user_behavior(user["id"])
    except BehaviorStoreUnavailable as exc:
        raise _store_unavailable(exc) from exc
    return record or BehaviorRecord(user_id=user["id"])


# ── Comparison & search ──────────────────────────────────────────────────


@app.post("/compare", response_model=ComparisonResult)
def compare(
    body: CompareRequest,
    user: dict | None = Depends(get_current_user),
) -> ComparisonResult:
    cars: list[Car] = []
    missing: list[int] = []
    for car_id in body.car_ids:
        try:
            cars.append(get_car(car_id))
        except CarNotFound:
            missing.append(car_id)
    if missing:
        raise HTTPException(
            status_code=404,
            detail={"message": "Some cars were not found", "missing_cars": missing},
        )

    preferences = None
    if user:
        try:
            behavior = get_behavior_store().fetch_user_behavior(user["id"])
        except BehaviorStoreUnavailable:
            behavior = None
        if behavior is not None:
            preferences = extract_preferences(behavior)

    result = compare_cars(cars, body.priority, preferences)

    record_event("comparison", {
        "user_id": user["id"] if user else None,
        "car_ids": body.car_ids,
        "priority": body.priority.value if body.priority else None,
    })
    return result


@app.post("/search/advanced", response_model=AdvancedSearchResponse)
def search_advanced(
    body: AdvancedSearchRequest,
    user: dict | None = Depends(get_current_user),
) -> AdvancedSearchResponse:
    return advanced_search(body, user_id=user["id"] if user else None)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())


@app.get("/feedback/stats")
def feedback_stats(user: dict = Depends(require_admin)) -> dict:
    return feedback_summary()


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()
