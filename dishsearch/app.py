from __future__ import annotations

from fastapi import FastAPI, Query

from .analytics.store import SearchHistoryStore
from .catalog.data_store import CatalogAccess, FileCatalog
from .catalog.models import Coordinates, Dish
from .geo.service import GeoService, HaversineGeoService
from .recommendations.engine import RecommendationEngine
from .recommendations.models import (
    BehaviorEvent,
    CookRecommendation,
    DishRecommendation,
    ProfileInsights,
    RecommendationOptions,
    RecommendationResult,
    UserProfile,
)
from .recommendations.personalized import PersonalizedRecommender
from .recommendations.profiles import UserProfileStore
from .search.cache import TTLCache
from .search.models import CategoryStats, SearchFilters, SearchResult
from .search.service import SearchService


def create_app(
    catalog: CatalogAccess | None = None,
    geo: GeoService | None = None,
    history: SearchHistoryStore | None = None,
    profiles: UserProfileStore | None = None,
    recommendation_engine: RecommendationEngine | None = None,
    cache: TTLCache | None = None,
) -> FastAPI:
    """Wire the engine components and expose them over HTTP."""
    catalog = catalog or FileCatalog()
    geo = geo or HaversineGeoService(catalog)
    history = history or SearchHistoryStore()
    profiles = profiles or UserProfileStore()
    cache = cache or TTLCache()

    search_service = SearchService(catalog, geo, history)
    engine = recommendation_engine or RecommendationEngine(catalog, geo=geo)
    personalized = PersonalizedRecommender(catalog, profiles)

    app = FastAPI(title="Dish Search & Recommendation API", version="1.0.0")
    app.state.search_service = search_service
    app.state.profiles = profiles
    app.state.cache = cache

    # ── Public endpoints ─────────────────────────────────────────────────

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/search", response_model=SearchResult)
    async def search(body: SearchFilters) -> SearchResult:
        return await search_service.search(body)

    @app.post("/recommendations", response_model=RecommendationResult)
    async def recommendations(body: RecommendationOptions) -> RecommendationResult:
        return await engine.get_recommendations(body)

    @app.get("/dishes/trending", response_model=list[Dish])
    async def trending(limit: int = Query(default=10, ge=1, le=50)) -> list[Dish]:
        return await cache.cached(
            {"op": "trending", "limit": limit},
            lambda: search_service.get_trending_dishes(limit),
        )

    @app.get("/dishes/{dish_id}/similar", response_model=list[Dish])
    async def similar(dish_id: str, limit: int = Query(default=6, ge=1, le=50)) -> list[Dish]:
        return await search_service.get_similar_dishes(dish_id, limit)

    @app.get("/categories/popular", response_model=list[CategoryStats])
    async def popular_categories() -> list[CategoryStats]:
        return await cache.cached(
            {"op": "popular_categories"},
            search_service.get_popular_categories,
        )

    # ── User endpoints ───────────────────────────────────────────────────

    @app.get("/users/{user_id}/recommendations/dishes", response_model=list[DishRecommendation])
    async def dish_recommendations(
        user_id: str, limit: int = Query(default=20, ge=1, le=100),
    ) -> list[DishRecommendation]:
        return await personalized.get_dish_recommendations(user_id, limit)

    @app.get("/users/{user_id}/recommendations/cooks", response_model=list[CookRecommendation])
    async def cook_recommendations(
        user_id: str, limit: int = Query(default=10, ge=1, le=100),
    ) -> list[CookRecommendation]:
        return await personalized.get_cook_recommendations(user_id, limit)

    @app.post("/users/{user_id}/events", response_model=UserProfile)
    def record_behavior(user_id: str, body: BehaviorEvent) -> UserProfile:
        return profiles.record(user_id, body)

    @app.put("/users/{user_id}/location", response_model=UserProfile)
    def set_location(user_id: str, body: Coordinates) -> UserProfile:
        return profiles.set_location(user_id, body)

    @app.get("/users/{user_id}/insights", response_model=ProfileInsights)
    def insights(user_id: str) -> ProfileInsights:
        return profiles.insights(user_id)

    @app.delete("/users/{user_id}/profile", status_code=204)
    def clear_profile(user_id: str) -> None:
        profiles.clear(user_id)

    # ── Admin endpoints ──────────────────────────────────────────────────

    @app.get("/analytics/search")
    def search_analytics() -> dict:
        return search_service.get_search_analytics()

    @app.get("/cache/stats")
    def cache_stats() -> dict:
        return cache.stats()

    return app


app = create_app()
