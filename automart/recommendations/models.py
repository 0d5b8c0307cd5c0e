from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ..inventory.models import Car
from .preferences import PreferenceTable
from .ranking import SuggestedFilters
from .scoring import Priority


class FallbackReason(str, Enum):
    no_behavior = "no_behavior"
    no_candidates = "no_candidates"
    store_unavailable = "store_unavailable"
    error = "error"


class RecommendationItem(BaseModel):
    car: Car
    match_score: float = Field(..., ge=0.0, le=1.0)
    match_reason: str


class RecommendationResponse(BaseModel):
    results: list[RecommendationItem]
    suggested_filters: SuggestedFilters | None = None
    preferences: PreferenceTable | None = None
    priority: Priority | None = None
    total_candidates: int = 0
    is_default: bool = False
    fallback_reason: FallbackReason | None = None


class LoginRequest(BaseModel):
    username: str
    password: str
