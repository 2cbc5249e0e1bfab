"""
Per-dish signals derived fresh on every recommendation call.

Popularity and trending jitter, the "new" fallback and the near-you sample
are stochastic placeholders for signals the platform does not track yet
(order velocity, real cook geolocation).  The random generator is always
passed in so callers can seed it.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime

from ..catalog.models import Dish
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig


@dataclass(frozen=True)
class DishSignals:
    popularity_score: float
    trending_score: float
    is_new: bool
    is_premium: bool
    is_quick_bite: bool


def derive_signals(
    dish: Dish,
    now: datetime,
    rng: random.Random,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> DishSignals:
    if dish.created_at is not None:
        is_new = dish.created_within(config.new_dish_days, now)
    else:
        is_new = rng.random() < config.new_dish_fallback_probability

    popularity = dish.rating * 20 + min(dish.review_count * 2, 40) + rng.random() * 40

    trending = rng.random() * 100
    if dish.rating >= 4.5:
        trending += 20
    if is_new:
        trending += 30

    return DishSignals(
        popularity_score=popularity,
        trending_score=trending,
        is_new=is_new,
        is_premium=dish.price > config.premium_min_price and dish.rating >= config.premium_min_rating,
        is_quick_bite=dish.prep_time_minutes <= config.quick_bite_max_minutes,
    )
