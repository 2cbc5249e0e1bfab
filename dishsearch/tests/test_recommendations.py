from __future__ import annotations

import asyncio
import random
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from dishsearch.catalog.data_store import InMemoryCatalog
from dishsearch.catalog.models import Dish
from dishsearch.errors import UpstreamDataError
from dishsearch.geo.service import HaversineGeoService
from dishsearch.recommendations.engine import RecommendationEngine
from dishsearch.recommendations.models import RecommendationOptions
from dishsearch.recommendations.signals import derive_signals
from dishsearch.recommendations.time_context import (
    TimeOfDay,
    is_time_relevant,
    time_of_day_at,
    time_of_day_for_hour,
)

BUCKETS = (
    "featured", "trending", "popular", "near_you", "for_you",
    "new_and_exciting", "quick_bites", "premium_picks",
)


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def engine(catalog, now) -> RecommendationEngine:
    return RecommendationEngine(catalog, clock=lambda: now, rng_factory=lambda: random.Random(42))


def _recommend(engine: RecommendationEngine, **options):
    return asyncio.run(engine.get_recommendations(RecommendationOptions(**options)))


def _ids(items) -> list[str]:
    return [item.dish.id for item in items]


# ── Time of day ──────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "hour, expected",
    [
        (5, TimeOfDay.late_night),
        (6, TimeOfDay.breakfast),
        (10, TimeOfDay.breakfast),
        (11, TimeOfDay.lunch),
        (15, TimeOfDay.lunch),
        (16, TimeOfDay.dinner),
        (22, TimeOfDay.dinner),
        (23, TimeOfDay.late_night),
        (0, TimeOfDay.late_night),
    ],
)
def test_time_of_day_for_hour(hour, expected):
    assert time_of_day_for_hour(hour) == expected


def test_time_of_day_at_uses_clock_hour():
    assert time_of_day_at(datetime(2026, 1, 1, 8, 30)) == TimeOfDay.breakfast


def test_time_relevance_matches_category_and_tags(dishes):
    by_id = {d.id: d for d in dishes}
    assert is_time_relevant(by_id["d6"], TimeOfDay.breakfast)
    assert is_time_relevant(by_id["d2"], TimeOfDay.lunch)
    assert is_time_relevant(by_id["d3"], TimeOfDay.dinner)
    assert not is_time_relevant(by_id["d3"], TimeOfDay.breakfast)


# ── Buckets ──────────────────────────────────────────────────────────────


def test_time_of_day_derived_from_clock(engine):
    result = _recommend(engine)
    assert result.time_of_day == TimeOfDay.lunch


def test_featured_uses_time_relevant_top_rated(engine):
    result = _recommend(engine, time_of_day="dinner")
    assert result.time_of_day == TimeOfDay.dinner
    assert _ids(result.featured) == ["d3", "d1", "d2"]
    assert result.featured[0].reasons[0] == "Ideal para la cena"


def test_quick_bites_only_fast_dishes():
    catalog = InMemoryCatalog([
        Dish.model_validate({"id": "fast", "name": "Sándwich", "prepTime": "15"}),
        Dish.model_validate({"id": "slow", "name": "Asado", "prepTime": "40"}),
    ])
    engine = RecommendationEngine(catalog, rng_factory=lambda: random.Random(1))
    result = asyncio.run(engine.get_recommendations())
    assert _ids(result.quick_bites) == ["fast"]


def test_quick_bites_ordered_by_prep_time(engine):
    result = _recommend(engine)
    assert _ids(result.quick_bites) == ["d5", "d6", "d1"]


def test_premium_picks_by_price(engine):
    result = _recommend(engine)
    assert _ids(result.premium_picks) == ["d8", "d3"]


def test_new_and_exciting_uses_creation_date(engine):
    result = _recommend(engine)
    assert _ids(result.new_and_exciting) == ["d1"]


def test_unavailable_dishes_never_recommended(engine):
    result = _recommend(engine)
    for bucket in BUCKETS:
        assert "d7" not in _ids(getattr(result, bucket))


def test_bucket_sizes_respect_defaults(engine):
    result = _recommend(engine)
    assert len(result.trending) == 7
    assert len(result.featured) <= 6
    assert len(result.near_you) <= 6


def test_limit_caps_every_bucket(engine):
    result = _recommend(engine, limit=1)
    for bucket in BUCKETS:
        assert len(getattr(result, bucket)) <= 1


def test_near_you_is_a_sample_ordered_by_rating(engine):
    result = _recommend(engine)
    ratings = [item.dish.rating for item in result.near_you]
    assert ratings == sorted(ratings, reverse=True)
    assert set(_ids(result.near_you)) <= set(_ids(result.trending))


def test_seeded_generator_is_reproducible(engine):
    first = _recommend(engine)
    second = _recommend(engine)
    assert first.model_dump() == second.model_dump()


# ── For you ──────────────────────────────────────────────────────────────


def test_for_you_matches_preferences(engine):
    result = _recommend(engine, time_of_day="dinner", user_preferences=["Pizza"])
    assert _ids(result.for_you) == ["d1", "d4"]
    assert result.for_you[0].reasons == ["Coincide con tus gustos: pizza"]


def test_for_you_excludes_previous_orders(engine):
    result = _recommend(
        engine, time_of_day="dinner", user_preferences=["pizza"], previous_orders=["d1"],
    )
    assert _ids(result.for_you) == ["d4"]


def test_for_you_falls_back_to_top_rated(engine):
    result = _recommend(engine, time_of_day="dinner", user_preferences=["vegan"])
    assert _ids(result.for_you) == ["d3", "d8", "d1", "d6", "d2"]


# ── Options narrowing ────────────────────────────────────────────────────


def test_budget_narrows_pool(engine):
    result = _recommend(engine, budget={"min": 0, "max": 10000})
    for bucket in BUCKETS:
        assert set(_ids(getattr(result, bucket))) <= {"d1", "d5", "d6"}
    assert result.premium_picks == []


def test_dietary_restrictions_narrow_pool(engine):
    result = _recommend(engine, dietary_restrictions=["vegan"])
    assert _ids(result.trending) == ["d5"]


def _geo_engine(catalog, now, geo) -> RecommendationEngine:
    return RecommendationEngine(
        catalog, clock=lambda: now, rng_factory=lambda: random.Random(42), geo=geo,
    )


def test_location_keeps_dishes_of_nearby_cooks(catalog, now, santiago):
    engine = _geo_engine(catalog, now, HaversineGeoService(catalog))
    result = _recommend(engine, location=santiago)
    assert sorted(_ids(result.trending)) == ["d1", "d2", "d3", "d4", "d6"]
    for bucket in BUCKETS:
        assert set(_ids(getattr(result, bucket))) <= {"d1", "d2", "d3", "d4", "d6"}


def test_location_without_nearby_cooks_uses_full_catalog(engine, catalog, now):
    geo_engine = _geo_engine(catalog, now, HaversineGeoService(catalog))
    far_away = _recommend(geo_engine, location={"latitude": 60.0, "longitude": 10.0})
    assert far_away.model_dump() == _recommend(engine).model_dump()


def test_geo_failure_uses_full_catalog(engine, catalog, now, santiago):
    geo = MagicMock()
    geo.get_nearby_cooks = AsyncMock(side_effect=UpstreamDataError("geo down"))
    result = _recommend(_geo_engine(catalog, now, geo), location=santiago)
    assert result.model_dump() == _recommend(engine).model_dump()


def test_catalog_failure_returns_empty_buckets(now):
    catalog = MagicMock()
    catalog.get_all_dishes = AsyncMock(side_effect=UpstreamDataError("timeout"))
    engine = RecommendationEngine(catalog, clock=lambda: now)
    result = asyncio.run(engine.get_recommendations())
    assert result.time_of_day == TimeOfDay.lunch
    for bucket in BUCKETS:
        assert getattr(result, bucket) == []


# ── Signals ──────────────────────────────────────────────────────────────


def test_signals_with_fixed_generator(now):
    dish = Dish(id="x", name="Ramen", price=16000, rating=4.6, review_count=30, prep_time_minutes=18)
    signals = derive_signals(dish, now, FixedRandom(0.05))
    assert signals.is_new is True
    assert signals.popularity_score == pytest.approx(4.6 * 20 + 40 + 2)
    assert signals.trending_score == pytest.approx(5 + 20 + 30)
    assert signals.is_premium is True
    assert signals.is_quick_bite is True


def test_known_creation_date_ignores_generator(now):
    old = Dish(id="x", name="Ramen", created_at=datetime(2020, 1, 1, tzinfo=timezone.utc))
    assert derive_signals(old, now, FixedRandom(0.0)).is_new is False
