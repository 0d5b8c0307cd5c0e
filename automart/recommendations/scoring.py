"""
Relative scoring of candidate cars.

Every attribute is scored by the candidate's position inside the min-max
range of the *current* candidate set, so the same car can score
differently in a different batch.  Ranking is always relative.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..inventory.models import Car
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .preferences import PreferenceTable


class Priority(str, Enum):
    price = "price"
    performance = "performance"
    fuel = "fuel"
    reliability = "reliability"
    luxury = "luxury"
    family = "family"
    value = "value"


@dataclass(frozen=True)
class ScoringWeights:
    price: float = 0.25
    year: float = 0.2
    mileage: float = 0.2
    horsepower: float = 0.1
    fuel_consumption: float = 0.1
    features: float = 0.15

    def total(self) -> float:
        return (
            self.price + self.year + self.mileage
            + self.horsepower + self.fuel_consumption + self.features
        )


DEFAULT_WEIGHTS = ScoringWeights()

# Each priority swaps in a complete weight vector.
PRIORITY_WEIGHTS: dict[Priority, ScoringWeights] = {
    Priority.price: ScoringWeights(
        price=0.4, year=0.15, mileage=0.15, horsepower=0.1, fuel_consumption=0.1, features=0.1,
    ),
    Priority.performance: ScoringWeights(
        price=0.1, year=0.2, mileage=0.1, horsepower=0.4, fuel_consumption=0.05, features=0.15,
    ),
    Priority.fuel: ScoringWeights(
        price=0.2, year=0.1, mileage=0.1, horsepower=0.05, fuel_consumption=0.45, features=0.1,
    ),
    Priority.reliability: ScoringWeights(
        price=0.1, year=0.35, mileage=0.35, horsepower=0.05, fuel_consumption=0.05, features=0.1,
    ),
    Priority.luxury: ScoringWeights(
        price=0.05, year=0.2, mileage=0.1, horsepower=0.2, fuel_consumption=0.05, features=0.4,
    ),
    Priority.family: ScoringWeights(
        price=0.2, year=0.15, mileage=0.15, horsepower=0.05, fuel_consumption=0.15, features=0.3,
    ),
    Priority.value: DEFAULT_WEIGHTS,
}


def weights_for(priority: Priority | None) -> ScoringWeights:
    if priority is None:
        return DEFAULT_WEIGHTS
    return PRIORITY_WEIGHTS[priority]


@dataclass(frozen=True)
class _Attribute:
    name: str
    value: Callable[[Car], float | None]
    lower_is_better: bool
    reason: str


_ATTRIBUTES: tuple[_Attribute, ...] = (
    _Attribute("price", lambda c: c.price, True, "competitive price"),
    _Attribute("year", lambda c: c.year, False, "newer model year"),
    _Attribute("mileage", lambda c: c.mileage, True, "low mileage"),
    _Attribute("horsepower", lambda c: c.horsepower, False, "strong performance"),
    _Attribute("fuel_consumption", lambda c: c.fuel_consumption, True, "fuel efficiency"),
    _Attribute("features", lambda c: len(c.features), False, "rich feature list"),
)

_PREFERENCE_REASONS = {
    "makes": "your preferred make",
    "models": "a model you showed interest in",
    "years": "your preferred model year",
    "price_ranges": "your price range",
    "body_types": "your preferred body type",
    "colors": "your preferred color",
}


@dataclass
class ScoredCar:
    car: Car
    score: float
    reasons: list[str] = field(default_factory=list)

    @property
    def match_reason(self) -> str:
        if not self.reasons:
            return "Matches your general preferences"
        return "Matches " + ", ".join(self.reasons)


def _ranges(candidates: list[Car]) -> dict[str, tuple[float, float]]:
    """Min and max per attribute; attributes with fewer than two known values are left out."""
    ranges: dict[str, tuple[float, float]] = {}
    for attr in _ATTRIBUTES:
        values = [v for v in (attr.value(c) for c in candidates) if v is not None]
        if len(values) > 1:
            ranges[attr.name] = (min(values), max(values))
    return ranges


def _score_with_ranges(
    car: Car,
    ranges: dict[str, tuple[float, float]],
    weights: ScoringWeights,
    preferences: PreferenceTable | None,
    config: RecommendationConfig,
) -> ScoredCar:
    score = config.baseline_score
    reasons: list[str] = []

    for attr in _ATTRIBUTES:
        value = attr.value(car)
        if value is None or attr.name not in ranges:
            continue
        low, high = ranges[attr.name]
        width = high - low
        if width <= 0:
            continue
        fraction = (value - low) / width
        if attr.lower_is_better:
            fraction = 1.0 - fraction
        w = getattr(weights, attr.name)
        score += fraction * w - w / 2
        if fraction > 0.5 and w > 0:
            reasons.append(attr.reason)

    if preferences is not None:
        matched: list[str] = []
        for pref_field, weight in preferences.car_weights(car, config.price_bucket_size).items():
            if weight > 0:
                score += config.preference_nudge
                matched.append(_PREFERENCE_REASONS[pref_field])
            else:
                score -= config.preference_nudge
        reasons = matched + reasons

    return ScoredCar(car=car, score=max(0.0, min(1.0, score)), reasons=reasons)


def score_candidate(
    car: Car,
    candidates: list[Car],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    preferences: PreferenceTable | None = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> ScoredCar:
    """Score *car* in [0, 1] relative to the rest of *candidates*."""
    return _score_with_ranges(car, _ranges(candidates), weights, preferences, config)


def score_candidates(
    candidates: list[Car],
    weights: ScoringWeights = DEFAULT_WEIGHTS,
    preferences: PreferenceTable | None = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> list[ScoredCar]:
    """Score every candidate against the same batch ranges, preserving input order."""
    ranges = _ranges(candidates)
    return [_score_with_ranges(c, ranges, weights, preferences, config) for c in candidates]
