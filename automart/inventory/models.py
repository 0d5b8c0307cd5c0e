from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class CarStatus(str, Enum):
    available = "available"
    sold = "sold"
    reserved = "reserved"


class Car(BaseModel):
    id: int
    make: str
    model: str
    year: int
    price: int = Field(..., ge=0)
    mileage: int | None = None
    color: str | None = None
    body_type: str | None = None
    transmission: str | None = None
    fuel_type: str | None = None
    features: list[str] = Field(default_factory=list)
    horsepower: int | None = None
    engine_size: float | None = None
    fuel_consumption: float | None = Field(
        default=None, description="Litres per 100 km"
    )
    status: CarStatus = CarStatus.available


class CandidateCriteria(BaseModel):
    """Coarse filter handed to the inventory before scoring."""

    make: str | None = None
    year_min: int | None = None
    year_max: int | None = None
    price_min: float | None = None
    price_max: float | None = None
    status: CarStatus | None = CarStatus.available
