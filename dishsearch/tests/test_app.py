from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from dishsearch.app import app, create_app
from dishsearch.errors import UpstreamDataError

client = TestClient(app)


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


class TestSearchEndpoint:
    def test_query(self):
        resp = client.post("/search", json={"query": "pizza"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_results"] == 1
        assert body["dishes"][0]["dish"]["id"] == "dish-1"
        assert "Nombre del plato" in body["dishes"][0]["match_reasons"]
        assert body["suggestions"] == ["pizza"]

    def test_dietary_filter(self):
        resp = client.post("/search", json={"dietary": ["vegan"]})
        body = resp.json()
        assert [item["dish"]["id"] for item in body["dishes"]] == ["dish-8"]

    def test_facets_present(self):
        body = client.post("/search", json={}).json()
        assert body["total_results"] == 11
        assert {"categories", "price_ranges", "ratings", "cooking_styles", "dietary", "prep_times"} <= set(body["facets"])

    def test_location_attaches_delivery_fields(self):
        resp = client.post("/search", json={
            "location": {"latitude": -33.4372, "longitude": -70.6506},
            "sort_by": "distance",
        })
        first = resp.json()["dishes"][0]
        assert first["distance_km"] == 0.0
        assert first["delivery_fee"] == 1500

    def test_invalid_sort_key_rejected(self):
        resp = client.post("/search", json={"sort_by": "cheapest"})
        assert resp.status_code == 422


def test_recommendations_respects_limit():
    resp = client.post("/recommendations", json={"time_of_day": "dinner", "limit": 3})
    assert resp.status_code == 200
    body = resp.json()
    assert body["time_of_day"] == "dinner"
    for bucket in ("featured", "trending", "popular", "for_you", "quick_bites"):
        assert len(body[bucket]) <= 3


def test_trending_is_cached():
    app.state.cache.clear()
    first = client.get("/dishes/trending", params={"limit": 3})
    second = client.get("/dishes/trending", params={"limit": 3})
    assert first.status_code == 200
    assert len(first.json()) == 3
    assert first.json() == second.json()
    stats = client.get("/cache/stats").json()
    assert stats["hits"] >= 1
    assert stats["misses"] >= 1


def test_similar_dishes_exclude_target():
    resp = client.get("/dishes/dish-1/similar")
    ids = [d["id"] for d in resp.json()]
    assert ids
    assert "dish-1" not in ids
    assert "dish-12" not in ids


def test_popular_categories():
    body = client.get("/categories/popular").json()
    assert sum(c["count"] for c in body) == 11
    counts = [c["count"] for c in body]
    assert counts == sorted(counts, reverse=True)


class TestUserEndpoints:
    def test_events_update_profile(self):
        resp = client.post("/users/api-u1/events", json={"action": "favorite", "category": "Italiana"})
        assert resp.status_code == 200
        assert resp.json()["favorite_categories"] == ["Italiana"]

        resp = client.post("/users/api-u1/events", json={"action": "order", "cook_id": "cook-2"})
        assert resp.json()["preferred_cooks"] == ["cook-2"]

    def test_invalid_action_rejected(self):
        resp = client.post("/users/api-u1/events", json={"action": "like"})
        assert resp.status_code == 422

    def test_dish_recommendations(self):
        client.post("/users/api-u2/events", json={"action": "view", "category": "Japonesa"})
        resp = client.get("/users/api-u2/recommendations/dishes", params={"limit": 5})
        body = resp.json()
        assert len(body) == 5
        assert all(0 <= r["score"] <= 100 for r in body)

    def test_insights(self):
        client.post("/users/api-u4/events", json={"action": "view", "category": "Peruana"})
        client.post("/users/api-u4/events", json={
            "action": "order", "cook_id": "cook-3", "ingredients": ["pescado", "limón"],
        })
        client.post("/users/api-u4/events", json={"action": "favorite", "ingredients": ["cilantro"]})
        body = client.get("/users/api-u4/insights").json()
        assert body == {
            "user_id": "api-u4",
            "top_categories": ["Peruana"],
            "top_ingredients": ["cilantro", "pescado", "limón"],
            "preferred_cooks": ["cook-3"],
        }

    def test_clear_profile(self):
        client.post("/users/api-u5/events", json={"action": "order", "cook_id": "cook-1"})
        resp = client.delete("/users/api-u5/profile")
        assert resp.status_code == 204
        assert client.get("/users/api-u5/insights").json()["preferred_cooks"] == []

    def test_cook_recommendations_with_location(self):
        client.put("/users/api-u3/location", json={"latitude": -33.4372, "longitude": -70.6506})
        body = client.get("/users/api-u3/recommendations/cooks").json()
        ids = [r["cook_id"] for r in body]
        assert "cook-5" not in ids
        assert len(ids) == 4
        by_id = {r["cook_id"]: r for r in body}
        assert "Cocina cerca de ti" in by_id["cook-1"]["reasons"]


def test_search_analytics_counts_searches():
    client.post("/search", json={"query": "empanadas", "category": "Chilena"})
    body = client.get("/analytics/search").json()
    assert body["total_searches"] >= 1
    assert "empanadas" in body["recent_searches"]
    assert body["filter_usage"]["category"] > 0


def test_upstream_failure_degrades_to_empty_responses():
    catalog = MagicMock()
    catalog.get_all_dishes = AsyncMock(side_effect=UpstreamDataError("timeout"))
    catalog.get_all_cooks = AsyncMock(side_effect=UpstreamDataError("timeout"))
    failing = TestClient(create_app(catalog=catalog))

    resp = failing.post("/search", json={"query": "pizza"})
    assert resp.status_code == 200
    assert resp.json()["dishes"] == []
    assert failing.get("/dishes/trending").json() == []
    assert failing.get("/users/u1/recommendations/dishes").json() == []

    recs = failing.post("/recommendations", json={}).json()
    assert recs["featured"] == []


def test_recovered_catalog_is_not_served_stale_empty_results(dishes):
    catalog = MagicMock()
    catalog.get_all_dishes = AsyncMock(side_effect=[UpstreamDataError("timeout"), dishes])
    flaky = TestClient(create_app(catalog=catalog))

    assert flaky.get("/dishes/trending").json() == []
    assert flaky.get("/dishes/trending").json() != []
