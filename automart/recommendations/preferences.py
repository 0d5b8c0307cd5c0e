from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig

if TYPE_CHECKING:
    from ..behavior.models import BehaviorRecord, SearchFilters
    from ..inventory.models import Car

PREFERENCE_FIELDS = ("makes", "models", "years", "price_ranges", "body_types", "colors")


def price_bucket(price: float, bucket_size: int = DEFAULT_RECOMMENDATION_CONFIG.price_bucket_size) -> int:
    """Round *price* down to the nearest bucket floor."""
    return int(price // bucket_size) * bucket_size


class PreferenceTable(BaseModel):
    """Weighted frequency maps per car attribute.

    Weights accumulate from views and searches and are adjusted up or down
    by explicit feedback, so individual entries can be negative.
    """

    makes: dict[str, int] = Field(default_factory=dict)
    models: dict[str, int] = Field(default_factory=dict)
    years: dict[int, int] = Field(default_factory=dict)
    price_ranges: dict[int, int] = Field(default_factory=dict)
    body_types: dict[str, int] = Field(default_factory=dict)
    colors: dict[str, int] = Field(default_factory=dict)

    def bump(self, field: str, value, delta: int) -> None:
        if value is None or value == "":
            return
        table: dict = getattr(self, field)
        table[value] = table.get(value, 0) + delta

    def is_empty(self) -> bool:
        return not any(getattr(self, f) for f in PREFERENCE_FIELDS)

    def merge(self, other: PreferenceTable) -> None:
        for field in PREFERENCE_FIELDS:
            for value, weight in getattr(other, field).items():
                self.bump(field, value, weight)

    def car_weights(
        self, car: Car, bucket_size: int = DEFAULT_RECOMMENDATION_CONFIG.price_bucket_size,
    ) -> dict[str, int]:
        """Return the non-zero weight this table holds for each of *car*'s attributes."""
        values = {
            "makes": car.make,
            "models": car.model,
            "years": car.year,
            "price_ranges": price_bucket(car.price, bucket_size),
            "body_types": car.body_type,
            "colors": car.color,
        }
        weights: dict[str, int] = {}
        for field, value in values.items():
            weight = getattr(self, field).get(value, 0)
            if weight:
                weights[field] = weight
        return weights


def _add_car(table: PreferenceTable, car, weight: int, bucket_size: int) -> None:
    table.bump("makes", car.make, weight)
    table.bump("models", car.model, weight)
    table.bump("years", car.year, weight)
    table.bump("price_ranges", price_bucket(car.price, bucket_size), weight)
    table.bump("body_types", car.body_type, weight)
    table.bump("colors", car.color, weight)


def _search_price(filters: SearchFilters) -> float | None:
    if filters.min_price is not None and filters.max_price is not None:
        return (filters.min_price + filters.max_price) / 2
    if filters.max_price is not None:
        return filters.max_price
    return filters.min_price


def _add_search(table: PreferenceTable, filters: SearchFilters, weight: int, bucket_size: int) -> None:
    table.bump("makes", filters.make, weight)
    table.bump("models", filters.model, weight)
    table.bump("years", filters.year, weight)
    price = _search_price(filters)
    if price is not None:
        table.bump("price_ranges", price_bucket(price, bucket_size), weight)
    table.bump("body_types", filters.body_type, weight)
    table.bump("colors", filters.color, weight)


def extract_preferences(
    behavior: BehaviorRecord | None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> PreferenceTable:
    """Build a fresh preference table from a user's behavior record.

    Direct views weigh ``config.view_weight`` and values taken from past
    search filters weigh ``config.search_weight``.  Signed feedback weights
    stored on the record are added last.  All signals count equally
    regardless of age.
    """
    table = PreferenceTable()
    if behavior is None:
        return table

    for viewed in behavior.viewed_cars:
        _add_car(table, viewed, config.view_weight, config.price_bucket_size)

    for search in behavior.searches:
        _add_search(table, search.filters, config.search_weight, config.price_bucket_size)

    table.merge(behavior.feedback)
    return table
