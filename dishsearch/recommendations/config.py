from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _default_bucket_limits() -> dict[str, int]:
    return {
        "featured": 6,
        "trending": 8,
        "popular": 8,
        "near_you": 6,
        "for_you": 8,
        "new_and_exciting": 6,
        "quick_bites": 6,
        "premium_picks": 6,
    }


@dataclass(frozen=True)
class RecommendationConfig:
    bucket_limits: dict[str, int] = field(default_factory=_default_bucket_limits)
    featured_min_rating: float = 4.0
    for_you_fallback_min_rating: float = 4.2
    new_dish_days: int = 7
    new_dish_fallback_probability: float = 0.1
    near_you_sample_rate: float = float(os.getenv("DISHSEARCH_NEAR_YOU_SAMPLE_RATE", "0.3"))
    location_radius_km: float = float(os.getenv("DISHSEARCH_RECOMMENDATION_RADIUS_KM", "15"))
    premium_min_price: float = 15000.0
    premium_min_rating: float = 4.5
    quick_bite_max_minutes: int = 20


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
