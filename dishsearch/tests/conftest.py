from __future__ import annotations

from datetime import datetime, timezone

import pytest

from dishsearch.catalog.data_store import InMemoryCatalog
from dishsearch.catalog.models import Coordinates, Cook, Dish

NOW = datetime(2026, 3, 10, 13, 0, tzinfo=timezone.utc)

SANTIAGO_CENTRO = Coordinates(latitude=-33.4372, longitude=-70.6506)


def _dishes() -> list[Dish]:
    return [
        Dish(
            id="d1", name="Pizza Margarita", description="Tomate, mozzarella y albahaca",
            category="Italiana", tags=["pizza", "vegetarian"], allergens=["gluten", "lactosa"],
            ingredients=["harina", "tomate", "mozzarella"],
            price=9000, rating=4.6, review_count=25, prep_time_minutes=20,
            cooker_id="c1", cooker_name="María",
            created_at=datetime(2026, 3, 8, tzinfo=timezone.utc),
        ),
        Dish(
            id="d2", name="Pasta Carbonara", description="Pasta fresca con huevo y panceta",
            category="Italiana", tags=["pasta"], allergens=["gluten", "huevo"],
            ingredients=["harina", "huevo", "panceta"],
            price=12000, rating=4.2, review_count=10, prep_time_minutes=30,
            cooker_id="c1", cooker_name="María",
            created_at=datetime(2025, 12, 1, tzinfo=timezone.utc),
        ),
        Dish(
            id="d3", name="Sushi Roll", description="Salmón y palta",
            category="Japonesa", tags=["sushi"], allergens=["pescado"],
            ingredients=["arroz", "salmón", "palta"],
            price=18000, rating=4.8, review_count=40, prep_time_minutes=45,
            cooker_id="c2", cooker_name="Kenji",
            created_at=datetime(2025, 11, 1, tzinfo=timezone.utc),
        ),
        Dish(
            id="d4", name="Pizza Pepperoni", description="Pepperoni y queso",
            category="Italiana", tags=["pizza"], allergens=["gluten", "lactosa"],
            ingredients=["harina", "pepperoni", "mozzarella"],
            price=11000, rating=3.9, review_count=5, prep_time_minutes=25,
            cooker_id="c2", cooker_name="Kenji",
            created_at=datetime(2025, 10, 1, tzinfo=timezone.utc),
        ),
        Dish(
            id="d5", name="Ensalada verde", description="Bowl vegan sin gluten",
            category="Saludable", tags=["vegan", "gluten-free"],
            ingredients=["lechuga", "palta"],
            price=6000, rating=4.0, review_count=3, prep_time_minutes=10,
            cooker_id="c3", cooker_name="Ana",
            created_at=datetime(2025, 9, 1, tzinfo=timezone.utc),
        ),
        Dish(
            id="d6", name="Tostadas con palta", description="Pan de masa madre",
            category="Desayuno", tags=["desayuno"], allergens=["gluten"],
            ingredients=["pan", "palta"],
            price=4000, rating=4.5, review_count=22, prep_time_minutes=10,
            cooker_id="c1", cooker_name="María",
            created_at=datetime(2025, 9, 1, tzinfo=timezone.utc),
        ),
        Dish(
            id="d7", name="Pizza Cuatro Quesos", description="Cuatro quesos",
            category="Italiana", tags=["pizza"], allergens=["lactosa"],
            price=10000, rating=4.9, review_count=80, prep_time_minutes=25,
            is_available=False, cooker_id="c1", cooker_name="María",
            created_at=datetime(2025, 9, 1, tzinfo=timezone.utc),
        ),
        Dish(
            id="d8", name="Wagyu Burger", description="Doble wagyu con cheddar",
            category="Americana", tags=["burger"], allergens=["gluten", "lactosa"],
            ingredients=["pan", "wagyu", "cheddar"],
            price=25000, rating=4.7, review_count=60, prep_time_minutes=35,
            cooker_id="c3", cooker_name="Ana",
            created_at=datetime(2025, 9, 1, tzinfo=timezone.utc),
        ),
    ]


def _cooks() -> list[Cook]:
    return [
        Cook(
            id="c1", display_name="María", rating=4.8, cooking_style="Casera",
            location=SANTIAGO_CENTRO, specialties=["Italiana", "Desayuno"], total_orders=340,
        ),
        Cook(
            id="c2", display_name="Kenji", rating=4.4, cooking_style="Gourmet",
            location=Coordinates(latitude=-33.4263, longitude=-70.6101),
            specialties=["Japonesa"], total_orders=80,
        ),
        Cook(
            id="c3", display_name="Ana", rating=4.1, cooking_style="Saludable",
            location=Coordinates(latitude=-33.0472, longitude=-71.6127),
            specialties=["Saludable"], total_orders=45,
        ),
        Cook(id="c4", display_name="Pedro", rating=3.5, is_active=False),
    ]


@pytest.fixture
def dishes() -> list[Dish]:
    return _dishes()


@pytest.fixture
def cooks() -> list[Cook]:
    return _cooks()


@pytest.fixture
def catalog(dishes, cooks) -> InMemoryCatalog:
    return InMemoryCatalog(dishes, cooks)


@pytest.fixture
def margarita_catalog() -> InMemoryCatalog:
    """Single-dish catalog built from a raw store document."""
    dish = Dish.model_validate({
        "id": "a",
        "name": "Pizza Margarita",
        "category": "Italiana",
        "price": 9000,
        "rating": 4.6,
        "reviewCount": 25,
        "prepTime": "20",
        "isAvailable": True,
        "tags": ["vegetarian"],
        "allergens": ["gluten"],
    })
    return InMemoryCatalog([dish])


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def santiago() -> Coordinates:
    return SANTIAGO_CENTRO
