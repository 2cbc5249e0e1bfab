from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..catalog.models import Coordinates, Dish
from ..search.models import PriceRange
from .time_context import TimeOfDay


class RecommendationOptions(BaseModel):
    time_of_day: TimeOfDay | None = Field(
        default=None, description="Override; derived from the clock when omitted",
    )
    user_preferences: list[str] = Field(
        default_factory=list, description="Categories or tags the user likes",
    )
    location: Coordinates | None = None
    budget: PriceRange | None = None
    dietary_restrictions: list[str] = Field(default_factory=list)
    previous_orders: list[str] = Field(default_factory=list, description="Dish ids")
    limit: int | None = Field(default=None, ge=1, le=50, description="Cap for every bucket")


class RecommendedDish(BaseModel):
    dish: Dish
    score: float
    reasons: list[str] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    time_of_day: TimeOfDay
    featured: list[RecommendedDish] = Field(default_factory=list)
    trending: list[RecommendedDish] = Field(default_factory=list)
    popular: list[RecommendedDish] = Field(default_factory=list)
    near_you: list[RecommendedDish] = Field(default_factory=list)
    for_you: list[RecommendedDish] = Field(default_factory=list)
    new_and_exciting: list[RecommendedDish] = Field(default_factory=list)
    quick_bites: list[RecommendedDish] = Field(default_factory=list)
    premium_picks: list[RecommendedDish] = Field(default_factory=list)


class DishMatchType(str, Enum):
    category = "category"
    cook = "cook"
    trending = "trending"
    similar = "similar"


class CookMatchType(str, Enum):
    rating = "rating"
    cuisine = "cuisine"
    location = "location"
    trending = "trending"


class DishRecommendation(BaseModel):
    dish_id: str
    score: float = Field(..., ge=0.0, le=100.0)
    match_type: DishMatchType
    reasons: list[str] = Field(default_factory=list)
    confidence: float


class CookRecommendation(BaseModel):
    cook_id: str
    score: float = Field(..., ge=0.0, le=100.0)
    match_type: CookMatchType
    reasons: list[str] = Field(default_factory=list)
    confidence: float


class BehaviorAction(str, Enum):
    view = "view"
    order = "order"
    favorite = "favorite"
    review = "review"


class BehaviorEvent(BaseModel):
    action: BehaviorAction
    category: str | None = None
    cook_id: str | None = None
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    ingredients: list[str] = Field(default_factory=list)


class UserProfile(BaseModel):
    user_id: str
    favorite_categories: list[str] = Field(default_factory=list)
    favorite_ingredients: list[str] = Field(default_factory=list)
    preferred_cooks: list[str] = Field(default_factory=list)
    location: Coordinates | None = None
    last_updated: datetime | None = None


class ProfileInsights(BaseModel):
    user_id: str
    top_categories: list[str] = Field(default_factory=list)
    top_ingredients: list[str] = Field(default_factory=list)
    preferred_cooks: list[str] = Field(default_factory=list)
