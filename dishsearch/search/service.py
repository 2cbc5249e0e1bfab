from __future__ import annotations

import logging
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from ..analytics.aggregator import compute_analytics
from ..analytics.store import SearchHistoryStore
from ..catalog.data_store import CatalogAccess
from ..catalog.models import Dish
from ..geo.service import GeoService
from .facets import build_facets
from .filters import FilterPipeline
from .models import CategoryStats, SearchFilters, SearchResult
from .scoring import score_candidates
from .sorting import sort_results

logger = logging.getLogger(__name__)

POPULAR_SEARCHES = [
    "pizza", "empanadas", "sushi", "hamburguesa", "pasta", "ensalada",
    "pollo", "vegetariano", "vegan", "sin gluten", "postre", "comida casera",
]
_MAX_SUGGESTIONS = 5


def generate_suggestions(query: str | None) -> list[str]:
    """Popular terms whose text, or one of its words, starts with *query*."""
    if not query or not query.strip():
        return POPULAR_SEARCHES[:_MAX_SUGGESTIONS]
    prefix = query.strip().lower()
    matches = [
        term for term in POPULAR_SEARCHES
        if term.startswith(prefix) or any(word.startswith(prefix) for word in term.split())
    ]
    return matches[:_MAX_SUGGESTIONS]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchService:
    """
    Entry point for catalog search.

    ``search`` and the browse helpers never raise: any failure is logged and
    turned into an empty, well-formed value.
    """

    def __init__(
        self,
        catalog: CatalogAccess,
        geo: GeoService | None = None,
        history: SearchHistoryStore | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.catalog = catalog
        self.pipeline = FilterPipeline(catalog, geo)
        self.history = history
        self.clock = clock

    async def search(self, filters: SearchFilters | Mapping[str, Any] | None = None) -> SearchResult:
        start_time = time.perf_counter()

        try:
            parsed = SearchFilters.from_raw(filters)
            dishes = await self.catalog.get_all_dishes()

            candidates = await self.pipeline.run(dishes, parsed)
            scored = score_candidates(candidates, parsed)
            ordered = sort_results(scored, parsed.sort_by)
            facets = await build_facets(ordered, self.catalog)
            suggestions = generate_suggestions(parsed.query)
        except Exception:
            logger.warning("Search failed, returning empty result", exc_info=True)
            return SearchResult(search_time_ms=self._elapsed_ms(start_time))

        elapsed_ms = self._elapsed_ms(start_time)
        self._track(parsed, len(ordered), elapsed_ms)

        return SearchResult(
            dishes=ordered,
            total_results=len(ordered),
            facets=facets,
            suggestions=suggestions,
            search_time_ms=elapsed_ms,
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * 1000, 1)

    def _track(self, filters: SearchFilters, total_results: int, elapsed_ms: float) -> None:
        if self.history is None:
            return
        try:
            if filters.query and filters.query.strip():
                self.history.record_query(filters.query.strip().lower())
            self.history.record_event("search", {
                "query": filters.query,
                "category": filters.category,
                "price_range": filters.price_range is not None,
                "rating": filters.rating,
                "prep_time": filters.prep_time is not None,
                "dietary": [d.value for d in filters.dietary],
                "allergens": filters.allergens,
                "location": filters.location is not None,
                "sort_by": filters.sort_by.value,
                "total_results": total_results,
                "search_time_ms": elapsed_ms,
            })
        except Exception:
            logger.warning("Failed to record search analytics", exc_info=True)

    def get_search_analytics(self) -> dict[str, Any]:
        if self.history is None:
            return compute_analytics(SearchHistoryStore())
        return compute_analytics(self.history)

    # ── Browse helpers ──────────────────────────────────────────────────

    async def get_similar_dishes(self, dish_id: str, limit: int = 6) -> list[Dish]:
        try:
            dishes = await self.catalog.get_all_dishes()
        except Exception:
            logger.warning("Error getting similar dishes for %s", dish_id, exc_info=True)
            return []

        target = next((d for d in dishes if d.id == dish_id), None)
        if target is None:
            return []

        scored = [
            (similarity(target, d), d)
            for d in dishes
            if d.id != dish_id and d.is_available
        ]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [d for _, d in scored[:limit]]

    async def get_trending_dishes(self, limit: int = 10) -> list[Dish]:
        try:
            dishes = await self.catalog.get_all_dishes()
        except Exception:
            logger.warning("Error getting trending dishes", exc_info=True)
            return []

        now = self.clock()
        scored = []
        for dish in dishes:
            if not dish.is_available:
                continue
            trend = dish.review_count * 2 + dish.rating * 10
            if dish.created_within(14, now):
                trend += 50
            scored.append((trend, dish))
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [d for _, d in scored[:limit]]

    async def get_popular_categories(self) -> list[CategoryStats]:
        try:
            dishes = await self.catalog.get_all_dishes()
        except Exception:
            logger.warning("Error getting popular categories", exc_info=True)
            return []

        stats: dict[str, dict[str, float]] = defaultdict(lambda: {"count": 0, "total_rating": 0.0})
        for dish in dishes:
            if not dish.is_available:
                continue
            stats[dish.category]["count"] += 1
            stats[dish.category]["total_rating"] += dish.rating

        result = [
            CategoryStats(
                category=category,
                count=int(s["count"]),
                avg_rating=s["total_rating"] / s["count"],
            )
            for category, s in stats.items()
        ]
        result.sort(key=lambda c: c.count, reverse=True)
        return result


def similarity(target: Dish, other: Dish) -> float:
    score = 0.0
    if other.category == target.category:
        score += 40
    score += sum(1 for tag in other.tags if tag in target.tags) * 10

    if target.price > 0:
        if abs(other.price - target.price) / target.price <= 0.3:
            score += 20
    elif other.price == target.price:
        score += 20

    if other.cooker_id and other.cooker_id == target.cooker_id:
        score += 30
    score += sum(1 for ing in other.ingredients if ing in target.ingredients) * 5
    return score
