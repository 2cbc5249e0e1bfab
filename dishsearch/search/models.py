from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..catalog.models import Coordinates, Dish
from ..errors import ConfigurationError


class SortKey(str, Enum):
    relevance = "relevance"
    price_low = "price_low"
    price_high = "price_high"
    rating = "rating"
    prep_time = "prep_time"
    distance = "distance"


class PrepTimeBucket(str, Enum):
    min_15 = "15 min"
    min_30 = "30 min"
    min_45 = "45 min"
    min_60_plus = "60+ min"

    @property
    def is_open_ended(self) -> bool:
        return "+" in self.value

    @property
    def minutes(self) -> int:
        return int(self.value.split()[0].rstrip("+"))


class DietaryTag(str, Enum):
    vegetarian = "vegetarian"
    vegan = "vegan"
    gluten_free = "gluten-free"
    keto = "keto"
    paleo = "paleo"


class PriceRange(BaseModel):
    min: float = Field(default=0.0, ge=0.0)
    max: float | None = Field(default=None, ge=0.0, description="None means unbounded")

    def contains(self, price: float) -> bool:
        return price >= self.min and (self.max is None or price <= self.max)


class SearchFilters(BaseModel):
    query: str | None = Field(default=None, max_length=200)
    category: str | None = None
    price_range: PriceRange | None = None
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    prep_time: PrepTimeBucket | None = None
    dietary: list[DietaryTag] = Field(default_factory=list)
    allergens: list[str] = Field(default_factory=list, description="Allergens to exclude")
    cooking_style: str | None = None
    location: Coordinates | None = None
    max_distance_km: float = Field(default=15.0, gt=0.0)
    sort_by: SortKey = SortKey.relevance
    availability: bool | None = None

    @field_validator("allergens")
    @classmethod
    def _lower_allergens(cls, v: list[str]) -> list[str]:
        return [a.strip().lower() for a in v if a.strip()]

    @classmethod
    def from_raw(cls, raw: SearchFilters | Mapping[str, Any] | None) -> SearchFilters:
        """Validate untrusted filter input, raising ConfigurationError."""
        if isinstance(raw, SearchFilters):
            return raw
        try:
            return cls.model_validate(dict(raw or {}))
        except (ValidationError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"invalid search filters: {exc}") from exc


class ScoredDish(BaseModel):
    dish: Dish
    score: float = 0.0
    match_reasons: list[str] = Field(default_factory=list)
    distance_km: float | None = None
    delivery_fee: float | None = None
    estimated_delivery_minutes: int | None = None


class CategoryFacet(BaseModel):
    name: str
    count: int


class PriceRangeFacet(BaseModel):
    range: str
    min: float
    max: float | None
    count: int


class RatingFacet(BaseModel):
    rating: int
    count: int


class CookingStyleFacet(BaseModel):
    style: str
    count: int


class DietaryFacet(BaseModel):
    type: str
    count: int


class PrepTimeFacet(BaseModel):
    time: str
    count: int


class SearchFacets(BaseModel):
    categories: list[CategoryFacet] = Field(default_factory=list)
    price_ranges: list[PriceRangeFacet] = Field(default_factory=list)
    ratings: list[RatingFacet] = Field(default_factory=list)
    cooking_styles: list[CookingStyleFacet] = Field(default_factory=list)
    dietary: list[DietaryFacet] = Field(default_factory=list)
    prep_times: list[PrepTimeFacet] = Field(default_factory=list)


class SearchResult(BaseModel):
    dishes: list[ScoredDish] = Field(default_factory=list)
    total_results: int = 0
    facets: SearchFacets = Field(default_factory=SearchFacets)
    suggestions: list[str] = Field(default_factory=list)
    search_time_ms: float = 0.0


class CategoryStats(BaseModel):
    category: str
    count: int
    avg_rating: float
