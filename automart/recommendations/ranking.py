from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, Field

from ..inventory.models import Car
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .scoring import ScoredCar


def rank(scored: list[ScoredCar], limit: int) -> list[ScoredCar]:
    """Sort by score descending and truncate; ``sorted`` is stable so ties keep input order."""
    if limit <= 0:
        return []
    return sorted(scored, key=lambda s: s.score, reverse=True)[:limit]


class YearRange(BaseModel):
    min: int
    max: int


class SuggestedFilters(BaseModel):
    makes: list[str] = Field(default_factory=list)
    body_types: list[str] = Field(default_factory=list)
    years: list[int] = Field(default_factory=list)
    year_range: YearRange | None = None


def _top(counter: Counter, n: int) -> list:
    return [value for value, _ in counter.most_common(n)]


def suggest_filters(
    cars: list[Car],
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> SuggestedFilters:
    makes: Counter[str] = Counter(c.make for c in cars if c.make)
    body_types: Counter[str] = Counter(c.body_type for c in cars if c.body_type)
    years: Counter[int] = Counter(c.year for c in cars if c.year)

    year_range = YearRange(min=min(years), max=max(years)) if years else None

    return SuggestedFilters(
        makes=_top(makes, config.suggested_makes),
        body_types=_top(body_types, config.suggested_body_types),
        years=_top(years, config.suggested_years),
        year_range=year_range,
    )
