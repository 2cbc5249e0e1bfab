"""
Per-user dish and cook recommendations.

Each candidate starts from ``rating * 10`` and collects additive bonuses.
``match_type`` holds a single label: every bonus stage that fires
overwrites it, so the last stage to fire wins even when several conditions
hold.  Whether that is intended is still open; do not switch to first-wins
or multi-label without confirming.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from ..catalog.data_store import CatalogAccess
from ..geo.service import distance_km
from .models import CookMatchType, CookRecommendation, DishMatchType, DishRecommendation
from .profiles import UserProfileStore
from .time_context import TIME_REASONS, is_time_relevant, time_of_day_at

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0
NEARBY_COOK_KM = 5.0


def clamp_score(score: float) -> float:
    return max(0.0, min(MAX_SCORE, score))


def confidence_for(score: float) -> float:
    if score > 80:
        return 0.9
    if score > 60:
        return 0.8
    return 0.7


def _local_now() -> datetime:
    return datetime.now().astimezone()


class PersonalizedRecommender:
    def __init__(
        self,
        catalog: CatalogAccess,
        profiles: UserProfileStore,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.catalog = catalog
        self.profiles = profiles
        self.clock = clock

    async def get_dish_recommendations(
        self, user_id: str, limit: int = 20,
    ) -> list[DishRecommendation]:
        try:
            profile = self.profiles.get(user_id)
            dishes = await self.catalog.get_all_dishes()
        except Exception:
            logger.warning("Dish recommendations unavailable for %s", user_id, exc_info=True)
            return []

        time_of_day = time_of_day_at(self.clock())
        favorite_categories = {c.lower() for c in profile.favorite_categories}
        preferred_cooks = set(profile.preferred_cooks)

        candidates = sorted(
            (d for d in dishes if d.is_available), key=lambda d: d.rating, reverse=True,
        )[: 2 * limit]

        recommendations: list[DishRecommendation] = []
        for dish in candidates:
            score = dish.rating * 10
            match_type = DishMatchType.similar
            reasons: list[str] = []

            if dish.category.lower() in favorite_categories:
                score += 30
                match_type = DishMatchType.category
                reasons.append(f"Te gusta la categoría {dish.category}")

            if dish.cooker_id in preferred_cooks:
                score += 25
                match_type = DishMatchType.cook
                reasons.append("De un cocinero que te gusta")

            if is_time_relevant(dish, time_of_day):
                score += 15
                reasons.append(TIME_REASONS[time_of_day])

            if dish.review_count > 20 and dish.rating >= 4.5:
                score += 20
                match_type = DishMatchType.trending
                reasons.append("Tendencia entre nuestros clientes")

            score = clamp_score(score)
            recommendations.append(DishRecommendation(
                dish_id=dish.id,
                score=score,
                match_type=match_type,
                reasons=reasons,
                confidence=confidence_for(score),
            ))

        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[:limit]

    async def get_cook_recommendations(
        self, user_id: str, limit: int = 10,
    ) -> list[CookRecommendation]:
        try:
            profile = self.profiles.get(user_id)
            cooks = await self.catalog.get_all_cooks()
        except Exception:
            logger.warning("Cook recommendations unavailable for %s", user_id, exc_info=True)
            return []

        favorite_categories = {c.lower() for c in profile.favorite_categories}

        candidates = sorted(
            (c for c in cooks if c.is_active), key=lambda c: c.rating, reverse=True,
        )[: 2 * limit]

        recommendations: list[CookRecommendation] = []
        for cook in candidates:
            score = cook.rating * 10
            match_type = CookMatchType.trending
            reasons: list[str] = []

            if cook.rating >= 4.5:
                score += 20
                match_type = CookMatchType.rating
                reasons.append("Excelente calificación")

            styles = {s.lower() for s in cook.specialties}
            if cook.cooking_style:
                styles.add(cook.cooking_style.lower())
            shared = styles & favorite_categories
            if shared:
                score += 30
                match_type = CookMatchType.cuisine
                reasons.append(f"Especializado en: {', '.join(sorted(shared))}")

            if profile.location is not None and cook.location is not None:
                if distance_km(profile.location, cook.location) <= NEARBY_COOK_KM:
                    score += 15
                    match_type = CookMatchType.location
                    reasons.append("Cocina cerca de ti")

            if cook.total_orders > 100:
                score += 20
                match_type = CookMatchType.trending
                reasons.append("Muy popular")

            score = clamp_score(score)
            recommendations.append(CookRecommendation(
                cook_id=cook.id,
                score=score,
                match_type=match_type,
                reasons=reasons,
                confidence=confidence_for(score),
            ))

        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[:limit]
