from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Iterable

from ..catalog.data_store import CatalogAccess
from ..catalog.models import Coordinates, Dish
from ..geo.service import GeoService
from ..search.filters import matches_dietary
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .models import RecommendationOptions, RecommendationResult, RecommendedDish
from .signals import DishSignals, derive_signals
from .time_context import TIME_REASONS, TimeOfDay, is_time_relevant, time_of_day_at

logger = logging.getLogger(__name__)

Candidate = tuple[Dish, DishSignals]


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _matches_preferences(dish: Dish, preferences: set[str]) -> str | None:
    """Return the preference that matched the dish's category or one of its tags."""
    if dish.category.lower() in preferences:
        return dish.category
    for tag in dish.tags:
        if tag.lower() in preferences:
            return tag
    return None


class RecommendationEngine:
    """
    Time-of-day aware, multi-bucket recommendations over the catalog.

    Every call draws a fresh generator from ``rng_factory``; pass a seeded
    factory to make the stochastic buckets reproducible.
    """

    def __init__(
        self,
        catalog: CatalogAccess,
        config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
        clock: Callable[[], datetime] = _local_now,
        rng_factory: Callable[[], random.Random] = random.Random,
        geo: GeoService | None = None,
    ) -> None:
        self.catalog = catalog
        self.geo = geo
        self.config = config
        self.clock = clock
        self.rng_factory = rng_factory

    async def get_recommendations(
        self, options: RecommendationOptions | None = None,
    ) -> RecommendationResult:
        options = options or RecommendationOptions()
        now = self.clock()
        time_of_day = options.time_of_day or time_of_day_at(now)

        try:
            dishes = await self.catalog.get_all_dishes()
            if options.location is not None:
                dishes = await self._near(dishes, options.location)
            return self._build(dishes, options, time_of_day, now, self.rng_factory())
        except Exception:
            logger.warning("Error generating recommendations", exc_info=True)
            return RecommendationResult(time_of_day=time_of_day)

    async def _near(self, dishes: list[Dish], location: Coordinates) -> list[Dish]:
        """Dishes from cooks around *location*; the full list when none are nearby."""
        if self.geo is None:
            return dishes
        try:
            nearby = await self.geo.get_nearby_cooks(
                location.latitude, location.longitude, self.config.location_radius_km,
            )
        except Exception:
            logger.warning("Nearby cook lookup failed, using the full catalog", exc_info=True)
            return dishes
        cook_ids = {n.cook.id for n in nearby}
        local = [d for d in dishes if d.cooker_id in cook_ids]
        return local or dishes

    def _limit(self, bucket: str, options: RecommendationOptions) -> int:
        return options.limit or self.config.bucket_limits[bucket]

    def _candidate_pool(self, dishes: Iterable[Dish], options: RecommendationOptions) -> list[Dish]:
        pool = [d for d in dishes if d.is_available]
        if options.budget is not None:
            pool = [d for d in pool if options.budget.contains(d.price)]
        if options.dietary_restrictions:
            pool = [d for d in pool if matches_dietary(d, options.dietary_restrictions)]
        return pool

    def _build(
        self,
        dishes: list[Dish],
        options: RecommendationOptions,
        time_of_day: TimeOfDay,
        now: datetime,
        rng: random.Random,
    ) -> RecommendationResult:
        cfg = self.config
        pool = self._candidate_pool(dishes, options)
        candidates: list[Candidate] = [(d, derive_signals(d, now, rng, cfg)) for d in pool]
        relevant = [c for c in candidates if is_time_relevant(c[0], time_of_day)]
        time_reason = TIME_REASONS[time_of_day]

        featured = self._rank(
            [c for c in relevant if c[0].rating >= cfg.featured_min_rating],
            key=lambda c: c[0].rating * 100 + c[0].review_count,
            limit=self._limit("featured", options),
            reasons=lambda c: [time_reason, f"Calificación {c[0].rating:.1f}"],
        )

        trending = self._rank(
            candidates,
            key=lambda c: c[1].trending_score,
            limit=self._limit("trending", options),
            reasons=lambda c: ["Tendencia ahora"] + (["Plato nuevo"] if c[1].is_new else []),
        )

        popular = self._rank(
            candidates,
            key=lambda c: c[1].popularity_score,
            limit=self._limit("popular", options),
            reasons=lambda c: ["Lo más pedido", f"{c[0].review_count} reseñas"],
        )

        # A random sample stands in for per-dish proximity.
        sampled = [c for c in candidates if rng.random() < cfg.near_you_sample_rate]
        near_you = self._rank(
            sampled,
            key=lambda c: c[0].rating,
            limit=self._limit("near_you", options),
            reasons=lambda c: ["Cerca de ti"],
        )

        for_you = self._for_you(candidates, relevant, options)

        new_and_exciting = self._rank(
            [c for c in candidates if c[1].is_new],
            key=lambda c: c[0].rating,
            limit=self._limit("new_and_exciting", options),
            reasons=lambda c: ["Plato nuevo"],
        )

        quick_bites = self._rank(
            [c for c in candidates if c[1].is_quick_bite],
            key=lambda c: c[0].prep_time_minutes,
            limit=self._limit("quick_bites", options),
            reasons=lambda c: [f"Listo en {c[0].prep_time_minutes} min"],
            descending=False,
        )

        premium_picks = self._rank(
            [c for c in candidates if c[1].is_premium],
            key=lambda c: c[0].price,
            limit=self._limit("premium_picks", options),
            reasons=lambda c: ["Selección premium", "Muy bien valorado"],
        )

        return RecommendationResult(
            time_of_day=time_of_day,
            featured=featured,
            trending=trending,
            popular=popular,
            near_you=near_you,
            for_you=for_you,
            new_and_exciting=new_and_exciting,
            quick_bites=quick_bites,
            premium_picks=premium_picks,
        )

    def _for_you(
        self,
        candidates: list[Candidate],
        relevant: list[Candidate],
        options: RecommendationOptions,
    ) -> list[RecommendedDish]:
        limit = self._limit("for_you", options)
        already_ordered = set(options.previous_orders)
        preferences = {p.strip().lower() for p in options.user_preferences if p.strip()}

        matched: list[tuple[Candidate, str]] = []
        if preferences:
            for c in relevant:
                if c[0].id in already_ordered:
                    continue
                hit = _matches_preferences(c[0], preferences)
                if hit is not None:
                    matched.append((c, hit))

        if matched:
            matched.sort(key=lambda m: m[0][0].rating, reverse=True)
            return [
                RecommendedDish(
                    dish=c[0],
                    score=c[0].rating,
                    reasons=[f"Coincide con tus gustos: {hit}"],
                )
                for c, hit in matched[:limit]
            ]

        fallback = [
            c for c in candidates
            if c[0].rating >= self.config.for_you_fallback_min_rating
            and c[0].id not in already_ordered
        ]
        return self._rank(
            fallback,
            key=lambda c: c[0].rating,
            limit=limit,
            reasons=lambda c: ["Recomendado para ti"],
        )

    @staticmethod
    def _rank(
        candidates: list[Candidate],
        key: Callable[[Candidate], float],
        limit: int,
        reasons: Callable[[Candidate], list[str]],
        descending: bool = True,
    ) -> list[RecommendedDish]:
        ordered = sorted(candidates, key=key, reverse=descending)
        return [
            RecommendedDish(dish=c[0], score=float(key(c)), reasons=reasons(c))
            for c in ordered[:limit]
        ]
