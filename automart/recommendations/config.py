from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class RecommendationConfig:
    # Preference extraction
    view_weight: int = 2
    search_weight: int = 1
    price_bucket_size: int = 10_000

    # Candidate fetching
    year_window: int = 3
    price_tolerance: float = 0.25

    # Scoring
    baseline_score: float = 0.5
    preference_nudge: float = 0.05

    # Behavior history caps (oldest entries evicted first)
    max_viewed_cars: int = int(os.getenv("AUTOMART_MAX_VIEWED_CARS", "50"))
    max_searches: int = int(os.getenv("AUTOMART_MAX_SEARCHES", "20"))

    # Default (non-personalized) recommendations
    default_top_score: float = 0.9
    default_score_step: float = 0.05

    # Suggested filters
    suggested_makes: int = 3
    suggested_body_types: int = 3
    suggested_years: int = 5

    cache_ttl_seconds: int = int(os.getenv("AUTOMART_CACHE_TTL", "300"))


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
