from __future__ import annotations

import logging
import time

from ..analytics.store import record_event
from ..behavior.store import BehaviorStore, BehaviorStoreUnavailable, get_behavior_store
from ..inventory.data_store import fetch_candidates
from ..inventory.models import CandidateCriteria
from .cache import cache_get, cache_set
from .candidates import get_candidates
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import FallbackReason, RecommendationItem, RecommendationResponse
from .preferences import extract_preferences
from .ranking import rank, suggest_filters
from .scoring import Priority, score_candidates, weights_for

logger = logging.getLogger(__name__)

DEFAULT_MATCH_REASON = "Popular and trending cars"


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 1)


def get_default_recommendations(
    limit: int,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> RecommendationResponse:
    """Non-personalized picks: available cars in inventory order."""
    try:
        cars = fetch_candidates(CandidateCriteria())
    except Exception:
        logger.warning("Inventory lookup failed, returning no default recommendations", exc_info=True)
        return RecommendationResponse(
            results=[], is_default=True, fallback_reason=FallbackReason.error,
        )

    top = cars[:max(limit, 0)]
    items = [
        RecommendationItem(
            car=car,
            match_score=round(max(0.0, config.default_top_score - i * config.default_score_step), 4),
            match_reason=DEFAULT_MATCH_REASON,
        )
        for i, car in enumerate(top)
    ]
    return RecommendationResponse(
        results=items,
        suggested_filters=suggest_filters(top, config),
        total_candidates=len(cars),
        is_default=True,
    )


def _fallback(
    limit: int,
    reason: FallbackReason,
    user_id: int,
    priority: Priority | None,
    start_time: float,
    config: RecommendationConfig,
) -> RecommendationResponse:
    response = get_default_recommendations(limit, config)
    response.fallback_reason = reason
    response.priority = priority
    record_event("recommendation", {
        "user_id": user_id,
        "priority": priority.value if priority else None,
        "personalized": False,
        "fallback_reason": reason.value,
        "total_candidates": response.total_candidates,
        "results_returned": len(response.results),
        "response_time_ms": _elapsed_ms(start_time),
        "cache_hit": False,
    })
    return response


def get_personalized_recommendations(
    user_id: int,
    limit: int,
    priority: Priority | None = None,
    store: BehaviorStore | None = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> RecommendationResponse:
    """Rank inventory for *user_id* from their behavior history.

    Never raises for collaborator failures: missing history, an empty
    candidate set, an unavailable behavior store or any other error all
    yield the default recommendations, tagged with ``fallback_reason``.
    """
    start_time = time.time()
    store = store or get_behavior_store()

    try:
        behavior = store.fetch_user_behavior(user_id)
        if behavior is None or behavior.is_empty():
            return _fallback(limit, FallbackReason.no_behavior, user_id, priority, start_time, config)

        preferences = extract_preferences(behavior, config)
        if preferences.is_empty():
            return _fallback(limit, FallbackReason.no_behavior, user_id, priority, start_time, config)

        # One entry per request; a newer behavior revision replaces it
        request_dict = {
            "user_id": user_id,
            "limit": limit,
            "priority": priority.value if priority else None,
        }
        cached = cache_get(
            "personalized", request_dict, config.cache_ttl_seconds, version=behavior.revision,
        )
        if cached is not None:
            record_event("recommendation", {
                "user_id": user_id,
                "priority": request_dict["priority"],
                "personalized": True,
                "fallback_reason": None,
                "total_candidates": cached.total_candidates,
                "results_returned": len(cached.results),
                "response_time_ms": _elapsed_ms(start_time),
                "cache_hit": True,
            })
            return cached

        criteria, candidates = get_candidates(preferences, config)
        if not candidates:
            logger.info("No candidates for user %s with criteria %s", user_id, criteria.model_dump())
            return _fallback(limit, FallbackReason.no_candidates, user_id, priority, start_time, config)

        scored = score_candidates(candidates, weights_for(priority), preferences, config)
        top = rank(scored, limit)

    except BehaviorStoreUnavailable:
        logger.warning("Behavior store unavailable, serving default recommendations")
        return _fallback(limit, FallbackReason.store_unavailable, user_id, priority, start_time, config)
    except Exception:
        logger.warning("Personalized recommendations failed, falling back to defaults", exc_info=True)
        return _fallback(limit, FallbackReason.error, user_id, priority, start_time, config)

    items = [
        RecommendationItem(
            car=s.car,
            match_score=round(s.score, 4),
            match_reason=s.match_reason,
        )
        for s in top
    ]
    response = RecommendationResponse(
        results=items,
        suggested_filters=suggest_filters([s.car for s in top], config),
        preferences=preferences,
        priority=priority,
        total_candidates=len(candidates),
    )

    cache_set(
        "personalized", request_dict, response,
        version=behavior.revision, ttl=config.cache_ttl_seconds,
    )

    record_event("recommendation", {
        "user_id": user_id,
        "priority": request_dict["priority"],
        "personalized": True,
        "fallback_reason": None,
        "total_candidates": len(candidates),
        "results_returned": len(items),
        "response_time_ms": _elapsed_ms(start_time),
        "cache_hit": False,
    })

    return response
