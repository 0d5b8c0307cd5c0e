"""
Side-by-side comparison of two to four cars.

Scores reuse the recommendation scorer, so a comparison and a
recommendation list agree on how a priority weighs each attribute.
"""
from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..inventory.models import Car
from ..recommendations.preferences import PreferenceTable
from ..recommendations.scoring import Priority, score_candidates, weights_for

MIN_CARS = 2
MAX_CARS = 4
CLEAR_WINNER_GAP = 0.15

_LOWER_IS_BETTER = ("price", "mileage", "fuel_consumption")
_HIGHER_IS_BETTER = ("year", "horsepower", "engine_size")
_TABLE_PROPERTIES = (
    "price", "year", "mileage", "transmission", "fuel_type",
    "color", "body_type", "engine_size", "horsepower", "fuel_consumption",
)

_PRIORITY_PHRASES = {
    Priority.price: "for its competitive price for what it offers",
    Priority.performance: "for its strong performance",
    Priority.fuel: "for its fuel efficiency",
    Priority.reliability: "for its reliability record",
    Priority.luxury: "for its luxury and advanced features",
    Priority.family: "as an excellent fit for a family in space and safety",
    Priority.value: "as the best value for money",
}


class CompareRequest(BaseModel):
    car_ids: list[int] = Field(..., min_length=MIN_CARS, max_length=MAX_CARS)
    priority: Priority | None = None

    @field_validator("car_ids")
    @classmethod
    def _unique_ids(cls, value: list[int]) -> list[int]:
        if len(set(value)) != len(value):
            raise ValueError("car_ids must be distinct")
        return value


class ComparisonItem(BaseModel):
    car: Car
    advantages: list[str]
    disadvantages: list[str]
    score: float
    value_score: float


class PropertyComparison(BaseModel):
    label: str
    values: dict[int, Any]
    winner: int | None = None


class ComparisonResult(BaseModel):
    items: list[ComparisonItem]
    comparison: dict[str, PropertyComparison]
    recommendation: str


def _others(car: Car, cars: list[Car]) -> list[Car]:
    return [c for c in cars if c.id != car.id]


def _plural(n: int, word: str) -> str:
    return f"{n} other {word}" + ("" if n == 1 else "s")


def advantages(car: Car, cars: list[Car]) -> list[str]:
    others = _others(car, cars)
    result: list[str] = []

    pricier = [c for c in others if c.price > car.price]
    if pricier:
        result.append(f"Cheaper than {_plural(len(pricier), 'car')}")

    older = [c for c in others if c.year < car.year]
    if older:
        result.append(f"Newer model than {_plural(len(older), 'car')}")

    if car.mileage is not None:
        higher = [c for c in others if c.mileage is not None and c.mileage > car.mileage]
        if higher:
            result.append(f"Lower mileage than {_plural(len(higher), 'car')}")

    if car.horsepower:
        if any(c.horsepower and c.horsepower < car.horsepower for c in others):
            result.append(f"More powerful engine ({car.horsepower} hp)")

    if car.fuel_consumption:
        if any(c.fuel_consumption and c.fuel_consumption > car.fuel_consumption for c in others):
            result.append(f"Lower fuel consumption ({car.fuel_consumption} L/100km)")

    if car.features:
        for other in others:
            if not other.features:
                continue
            unique = [f for f in car.features if f not in other.features]
            if unique:
                result.append(f"Has {len(unique)} features missing from the {other.make} {other.model}")
                break

    if len(result) < 3:
        if car.transmission == "automatic" and any(c.transmission == "manual" for c in others):
            result.append("Automatic transmission")
        if car.body_type == "SUV" and any(c.body_type != "SUV" for c in others):
            result.append("SUV body better suited to rough roads")

    return result


def disadvantages(car: Car, cars: list[Car]) -> list[str]:
    others = _others(car, cars)
    result: list[str] = []

    cheaper = [c for c in others if c.price < car.price]
    if cheaper:
        result.append(f"More expensive than {_plural(len(cheaper), 'car')}")

    newer = [c for c in others if c.year > car.year]
    if newer:
        result.append(f"Older model than {_plural(len(newer), 'car')}")

    if car.mileage is not None:
        lower = [c for c in others if c.mileage is not None and c.mileage < car.mileage]
        if lower:
            result.append(f"Higher mileage than {_plural(len(lower), 'car')}")

    if car.horsepower:
        if any(c.horsepower and c.horsepower > car.horsepower for c in others):
            result.append(f"Less powerful engine ({car.horsepower} hp)")

    if car.fuel_consumption:
        if any(c.fuel_consumption and c.fuel_consumption < car.fuel_consumption for c in others):
            result.append(f"Higher fuel consumption ({car.fuel_consumption} L/100km)")

    for other in others:
        if other.features and car.features is not None:
            missing = [f for f in other.features if f not in car.features]
            if missing:
                result.append(f"Lacks {len(missing)} features found on the {other.make} {other.model}")
                break

    if len(result) < 2:
        if car.transmission == "manual" and any(c.transmission == "automatic" for c in others):
            result.append("Manual transmission takes more effort to drive")
        if car.body_type == "Sedan" and any(c.body_type == "SUV" for c in others):
            result.append("Less interior space than the SUVs compared")

    return result


def value_score(car: Car, cars: list[Car], current_year: int | None = None) -> float:
    """Estimated value for money in [0, 1]; higher means more car per unit of price."""
    current_year = current_year or dt.date.today().year
    avg_price = sum(c.price for c in cars) / len(cars)

    estimate = (car.year - (current_year - 10)) / 10 * 0.4
    if car.mileage is not None:
        estimate += (1 - car.mileage / 200_000) * 0.3
    if car.features:
        estimate += min(1.0, len(car.features) / 20) * 0.2
    if car.horsepower:
        estimate += min(1.0, car.horsepower / 400) * 0.1
    estimate = max(0.2, min(1.0, estimate))

    if car.price <= 0:
        return 1.0
    return max(0.0, min(1.0, estimate * avg_price / car.price))


def comparison_table(cars: list[Car]) -> dict[str, PropertyComparison]:
    table: dict[str, PropertyComparison] = {}
    for prop in _TABLE_PROPERTIES:
        values = {c.id: getattr(c, prop) for c in cars}
        if not any(values.values()):
            continue

        winner = None
        known = {car_id: v for car_id, v in values.items() if v}
        if prop in _LOWER_IS_BETTER:
            winner = min(known, key=known.get)
        elif prop in _HIGHER_IS_BETTER:
            winner = max(known, key=known.get)

        table[prop] = PropertyComparison(label=prop, values=values, winner=winner)
    return table


def _recommendation(items: list[ComparisonItem], priority: Priority | None) -> str:
    by_score = sorted(items, key=lambda i: i.score, reverse=True)
    top, runner_up = by_score[0], by_score[1]
    best_value = max(items, key=lambda i: i.value_score)

    def name(item: ComparisonItem) -> str:
        return f"{item.car.make} {item.car.model}"

    if top.score - runner_up.score > CLEAR_WINNER_GAP:
        text = f"We strongly recommend the {name(top)} {top.car.year}"
        if priority is not None:
            text += " " + _PRIORITY_PHRASES[priority]
        else:
            text += " as it leads on most comparison criteria"
    else:
        text = f"The {name(top)} and the {name(runner_up)} score closely overall"
        if best_value.car.id != top.car.id:
            text += f", but the {name(best_value)} offers the best value for money"
        if top.car.price < runner_up.car.price:
            text += f". The {name(top)} is about {runner_up.car.price - top.car.price:,} cheaper"
        elif top.car.year > runner_up.car.year:
            text += f". The {name(top)} is {top.car.year - runner_up.car.year} years newer"

    return text + ". Review each car's advantages and disadvantages before deciding."


def compare_cars(
    cars: list[Car],
    priority: Priority | None = None,
    preferences: PreferenceTable | None = None,
) -> ComparisonResult:
    if not MIN_CARS <= len(cars) <= MAX_CARS:
        raise ValueError(f"Comparison needs between {MIN_CARS} and {MAX_CARS} cars")

    scored = score_candidates(cars, weights_for(priority), preferences)
    items = [
        ComparisonItem(
            car=s.car,
            advantages=advantages(s.car, cars),
            disadvantages=disadvantages(s.car, cars),
            score=round(s.score, 4),
            value_score=round(value_score(s.car, cars), 4),
        )
        for s in scored
    ]
    return ComparisonResult(
        items=items,
        comparison=comparison_table(cars),
        recommendation=_recommendation(items, priority),
    )
