from __future__ import annotations

import time

from pydantic import BaseModel, Field

from ..recommendations.preferences import PreferenceTable


class SearchFilters(BaseModel):
    make: str | None = None
    model: str | None = None
    year: int | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    body_type: str | None = None
    color: str | None = None


class SearchEntry(BaseModel):
    query: str = ""
    filters: SearchFilters = Field(default_factory=SearchFilters)
    timestamp: float = Field(default_factory=time.time)


class ViewedCar(BaseModel):
    """Snapshot of a car's attributes at the moment it was viewed."""

    car_id: int
    make: str
    model: str
    year: int
    price: int
    body_type: str | None = None
    color: str | None = None
    duration_seconds: float = Field(default=0.0, ge=0.0)
    timestamp: float = Field(default_factory=time.time)


class BehaviorRecord(BaseModel):
    user_id: int
    viewed_cars: list[ViewedCar] = Field(default_factory=list)
    searches: list[SearchEntry] = Field(default_factory=list)
    feedback: PreferenceTable = Field(default_factory=PreferenceTable)
    revision: int = 0
    updated_at: float = Field(default_factory=time.time)

    def is_empty(self) -> bool:
        return not self.viewed_cars and not self.searches and self.feedback.is_empty()


class ViewRequest(BaseModel):
    car_id: int
    duration_seconds: float = Field(default=0.0, ge=0.0)


class SearchRequest(BaseModel):
    query: str = Field(default="", max_length=500)
    filters: SearchFilters = Field(default_factory=SearchFilters)


class FeedbackRequest(BaseModel):
    car_id: int
    is_positive: bool


class FeedbackResponse(BaseModel):
    status: str
    total_feedback: int
