from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_PREP_TIME_MINUTES = 30

_NON_DIGIT_RE = re.compile(r"\D")


def parse_minutes(value: object) -> int:
    """Parse ``"20"``, ``"20 min"`` or ``20`` into minutes, defaulting to 30."""
    if isinstance(value, bool) or value is None:
        return DEFAULT_PREP_TIME_MINUTES
    if isinstance(value, (int, float)):
        minutes = int(value)
    else:
        digits = _NON_DIGIT_RE.sub("", str(value))
        minutes = int(digits) if digits else 0
    return minutes if minutes > 0 else DEFAULT_PREP_TIME_MINUTES


class Coordinates(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class Dish(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str = ""
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    ingredients: list[str] = Field(default_factory=list)
    allergens: list[str] = Field(default_factory=list)
    price: float = Field(default=0.0, ge=0.0)
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    review_count: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("review_count", "reviewCount"),
    )
    prep_time_minutes: int = Field(
        default=DEFAULT_PREP_TIME_MINUTES,
        gt=0,
        validation_alias=AliasChoices("prep_time_minutes", "prepTime", "prep_time"),
    )
    is_available: bool = Field(
        default=True, validation_alias=AliasChoices("is_available", "isAvailable"),
    )
    cooker_id: str = Field(default="", validation_alias=AliasChoices("cooker_id", "cookerId"))
    cooker_name: str = Field(
        default="", validation_alias=AliasChoices("cooker_name", "cookerName"),
    )
    created_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("created_at", "createdAt"),
    )

    @field_validator("prep_time_minutes", mode="before")
    @classmethod
    def _parse_prep_time(cls, v: object) -> int:
        return parse_minutes(v)

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def created_within(self, days: float, now: datetime) -> bool:
        """False when the creation date is unknown."""
        if self.created_at is None:
            return False
        return self.created_at > now - timedelta(days=days)


class Cook(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    display_name: str = Field(
        default="", validation_alias=AliasChoices("display_name", "displayName"),
    )
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    cooking_style: str = Field(
        default="", validation_alias=AliasChoices("cooking_style", "cookingStyle"),
    )
    location: Coordinates | None = None
    is_active: bool = Field(default=True, validation_alias=AliasChoices("is_active", "isActive"))
    specialties: list[str] = Field(default_factory=list)
    total_orders: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("total_orders", "totalOrders"),
    )
