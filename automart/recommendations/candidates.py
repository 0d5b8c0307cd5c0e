from __future__ import annotations

import numpy as np

from ..inventory.data_store import fetch_candidates
from ..inventory.models import CandidateCriteria, Car
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .preferences import PreferenceTable


def _positive(table: dict) -> dict:
    return {value: weight for value, weight in table.items() if weight > 0}


def _weighted_average(table: dict[int, int]) -> float | None:
    positive = _positive(table)
    if not positive:
        return None
    values = np.array(list(positive.keys()), dtype=float)
    weights = np.array(list(positive.values()), dtype=float)
    return float(np.average(values, weights=weights))


def top_value(table: dict):
    """Highest positive weight; the first value seen wins a tie."""
    positive = _positive(table)
    if not positive:
        return None
    return max(positive, key=positive.get)


def build_criteria(
    preferences: PreferenceTable,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> CandidateCriteria:
    criteria = CandidateCriteria(make=top_value(preferences.makes))

    avg_year = _weighted_average(preferences.years)
    if avg_year is not None:
        criteria.year_min = int(np.floor(avg_year - config.year_window))
        criteria.year_max = int(np.ceil(avg_year + config.year_window))

    # Buckets hold their floor; price them at the bucket midpoint
    buckets = {
        bucket + config.price_bucket_size / 2: weight
        for bucket, weight in preferences.price_ranges.items()
    }
    avg_price = _weighted_average(buckets)
    if avg_price is not None:
        criteria.price_min = round(avg_price * (1 - config.price_tolerance), 2)
        criteria.price_max = round(avg_price * (1 + config.price_tolerance), 2)

    return criteria


def get_candidates(
    preferences: PreferenceTable,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> tuple[CandidateCriteria, list[Car]]:
    criteria = build_criteria(preferences, config)
    return criteria, fetch_candidates(criteria)
