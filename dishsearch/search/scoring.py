from __future__ import annotations

from ..catalog.models import Dish
from .models import ScoredDish, SearchFilters

# Match reasons shown as chips in the UI.
REASON_NAME = "Nombre del plato"
REASON_DESCRIPTION = "Descripción"
REASON_TAGS = "Categoría"
REASON_EXACT_CATEGORY = "Categoría exacta"
REASON_TOP_RATED = "Muy bien valorado"
REASON_POPULAR = "Muy popular"


def score_dish(dish: Dish, filters: SearchFilters) -> tuple[float, list[str]]:
    """Compute the relevance score and the ordered reasons that produced it."""
    score = dish.rating * 10
    score += min(dish.review_count * 0.5, 20)
    reasons: list[str] = []

    if filters.query:
        query = filters.query.lower()
        if query in dish.name.lower():
            score += 50
            reasons.append(REASON_NAME)
        if query in dish.description.lower():
            score += 30
            reasons.append(REASON_DESCRIPTION)
        if any(query in tag.lower() for tag in dish.tags):
            score += 20
            reasons.append(REASON_TAGS)

    if filters.category and dish.category.lower() == filters.category.lower():
        score += 25
        reasons.append(REASON_EXACT_CATEGORY)

    if dish.rating >= 4.5:
        score += 15
        reasons.append(REASON_TOP_RATED)

    if dish.review_count >= 20:
        score += 10
        reasons.append(REASON_POPULAR)

    return score, reasons


def score_candidates(items: list[ScoredDish], filters: SearchFilters) -> list[ScoredDish]:
    scored: list[ScoredDish] = []
    for item in items:
        score, reasons = score_dish(item.dish, filters)
        scored.append(item.model_copy(update={"score": score, "match_reasons": reasons}))
    return scored
