from __future__ import annotations

import logging
import math
from collections import Counter

from ..catalog.data_store import CatalogAccess
from .models import (
    CategoryFacet,
    CookingStyleFacet,
    DietaryFacet,
    DietaryTag,
    PrepTimeFacet,
    PriceRangeFacet,
    RatingFacet,
    ScoredDish,
    SearchFacets,
)

logger = logging.getLogger(__name__)

# (label, lower bound inclusive, upper bound exclusive)
PRICE_BANDS: list[tuple[str, float, float | None]] = [
    ("Hasta $5.000", 0, 5000),
    ("$5.000 - $10.000", 5000, 10000),
    ("$10.000 - $15.000", 10000, 15000),
    ("$15.000 - $20.000", 15000, 20000),
    ("Más de $20.000", 20000, None),
]

DIETARY_VOCABULARY: list[str] = [tag.value for tag in DietaryTag]

# First match wins; anything slower lands in the open-ended bucket.
PREP_TIME_BUCKETS: list[tuple[str, int]] = [
    ("15 min", 15),
    ("30 min", 30),
    ("45 min", 45),
]
PREP_TIME_OPEN_BUCKET = "60+ min"


def prep_time_bucket(minutes: int) -> str:
    for label, limit in PREP_TIME_BUCKETS:
        if minutes <= limit:
            return label
    return PREP_TIME_OPEN_BUCKET


def _price_facets(items: list[ScoredDish]) -> list[PriceRangeFacet]:
    facets: list[PriceRangeFacet] = []
    for label, low, high in PRICE_BANDS:
        count = sum(
            1 for i in items
            if i.dish.price >= low and (high is None or i.dish.price < high)
        )
        # Empty bands are dropped.
        if count > 0:
            facets.append(PriceRangeFacet(range=label, min=low, max=high, count=count))
    return facets


def _dietary_facets(items: list[ScoredDish]) -> list[DietaryFacet]:
    counter: Counter[str] = Counter()
    for item in items:
        text = f"{item.dish.description} {' '.join(item.dish.tags)}".lower()
        for option in DIETARY_VOCABULARY:
            if option in text:
                counter[option] += 1
    return [DietaryFacet(type=t, count=c) for t, c in counter.items()]


async def _cooking_style_facets(
    items: list[ScoredDish], catalog: CatalogAccess,
) -> list[CookingStyleFacet]:
    try:
        cooks = await catalog.get_all_cooks()
    except Exception:
        logger.warning("Cook lookup failed, omitting cooking style facets", exc_info=True)
        return []
    style_by_cook = {c.id: c.cooking_style for c in cooks}
    counter: Counter[str] = Counter()
    for item in items:
        style = style_by_cook.get(item.dish.cooker_id)
        if style:
            counter[style] += 1
    return [CookingStyleFacet(style=s, count=c) for s, c in counter.items()]


async def build_facets(items: list[ScoredDish], catalog: CatalogAccess) -> SearchFacets:
    """Aggregate facet counts over the filtered (not raw) result set."""
    categories: Counter[str] = Counter(i.dish.category for i in items)
    ratings: Counter[int] = Counter(math.floor(i.dish.rating) for i in items)
    prep_times: Counter[str] = Counter(prep_time_bucket(i.dish.prep_time_minutes) for i in items)

    return SearchFacets(
        categories=[CategoryFacet(name=n, count=c) for n, c in categories.items()],
        price_ranges=_price_facets(items),
        ratings=[RatingFacet(rating=r, count=ratings[r]) for r in sorted(ratings)],
        cooking_styles=await _cooking_style_facets(items, catalog),
        dietary=_dietary_facets(items),
        prep_times=[PrepTimeFacet(time=t, count=c) for t, c in prep_times.items()],
    )
