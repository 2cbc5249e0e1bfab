from __future__ import annotations

import logging
from typing import Awaitable, Callable

from ..catalog.data_store import CatalogAccess
from ..catalog.models import Dish
from ..geo.service import GeoService
from .models import ScoredDish, SearchFilters

logger = logging.getLogger(__name__)

Stage = Callable[[list[ScoredDish], SearchFilters], Awaitable[list[ScoredDish]]]


def tokenize_query(query: str | None) -> list[str]:
    """Lower-cased whitespace tokens, dropping single characters."""
    if not query:
        return []
    return [term for term in query.lower().split() if len(term) > 1]


def searchable_text(dish: Dish) -> str:
    return " ".join(
        [dish.name, dish.description, dish.category, *dish.tags, *dish.ingredients, dish.cooker_name]
    ).lower()


def matches_dietary(dish: Dish, requested: list[str]) -> bool:
    """True when any requested tag is a substring of a dish tag or its description."""
    description = dish.description.lower()
    tags = [t.lower() for t in dish.tags]
    for diet in requested:
        diet = diet.lower()
        if any(diet in tag for tag in tags) or diet in description:
            return True
    return False


class FilterPipeline:
    """
    Sequential hard-constraint reduction of the candidate set.

    Each stage consumes the previous stage's output, so the result can only
    shrink.  Stages depending on an upstream lookup (cooking style, geo) are
    skipped when that lookup fails.
    """

    def __init__(self, catalog: CatalogAccess, geo: GeoService | None = None) -> None:
        self.catalog = catalog
        self.geo = geo
        self.stages: list[Stage] = [
            self._availability,
            self._text_query,
            self._category,
            self._price_range,
            self._rating,
            self._prep_time,
            self._dietary,
            self._allergens,
            self._cooking_style,
            self._location,
        ]

    async def run(self, dishes: list[Dish], filters: SearchFilters) -> list[ScoredDish]:
        candidates = [ScoredDish(dish=d) for d in dishes]
        for stage in self.stages:
            candidates = await stage(candidates, filters)
        return candidates

    async def _availability(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        if filters.availability is False:
            return items
        return [i for i in items if i.dish.is_available]

    async def _text_query(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        terms = tokenize_query(filters.query)
        if not terms:
            return items
        return [
            i for i in items
            if any(term in searchable_text(i.dish) for term in terms)
        ]

    async def _category(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        if not filters.category:
            return items
        category = filters.category.lower()
        return [i for i in items if i.dish.category.lower() == category]

    async def _price_range(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        if filters.price_range is None:
            return items
        return [i for i in items if filters.price_range.contains(i.dish.price)]

    async def _rating(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        if not filters.rating:
            return items
        return [i for i in items if i.dish.rating >= filters.rating]

    async def _prep_time(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        bucket = filters.prep_time
        if bucket is None:
            return items
        if bucket.is_open_ended:
            return [i for i in items if i.dish.prep_time_minutes >= bucket.minutes]
        return [i for i in items if i.dish.prep_time_minutes <= bucket.minutes]

    async def _dietary(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        if not filters.dietary:
            return items
        requested = [d.value for d in filters.dietary]
        return [i for i in items if matches_dietary(i.dish, requested)]

    async def _allergens(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        if not filters.allergens:
            return items
        excluded = set(filters.allergens)
        return [
            i for i in items
            if not any(a.lower() in excluded for a in i.dish.allergens)
        ]

    async def _cooking_style(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        if not filters.cooking_style:
            return items
        style = filters.cooking_style.lower()
        try:
            cooks = await self.catalog.get_all_cooks()
        except Exception:
            logger.warning("Cook lookup failed, skipping cooking style filter", exc_info=True)
            return items
        cook_ids = {c.id for c in cooks if c.cooking_style.lower() == style}
        return [i for i in items if i.dish.cooker_id in cook_ids]

    async def _location(self, items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
        location = filters.location
        if location is None:
            return items
        if self.geo is None:
            logger.warning("No geo service configured, skipping location filter")
            return items
        try:
            nearby = await self.geo.get_nearby_cooks(
                location.latitude, location.longitude, filters.max_distance_km,
            )
            by_cook = {}
            for entry in nearby:
                by_cook.setdefault(entry.cook.id, entry)

            located: list[ScoredDish] = []
            for item in items:
                entry = by_cook.get(item.dish.cooker_id)
                if entry is None or entry.cook.location is None:
                    continue
                quote = self.geo.calculate_delivery_fee(location, entry.cook.location)
                located.append(item.model_copy(update={
                    "distance_km": entry.distance_km,
                    "delivery_fee": quote.total_fee,
                    "estimated_delivery_minutes": quote.estimated_time_minutes,
                }))
            return located
        except Exception:
            logger.warning("Geo lookup failed, skipping location filter", exc_info=True)
            return items
