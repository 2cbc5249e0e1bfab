from __future__ import annotations

import threading
from datetime import datetime, timezone

from ..catalog.models import Coordinates
from .models import BehaviorAction, BehaviorEvent, ProfileInsights, UserProfile

_MAX_FAVORITE_CATEGORIES = 10
_MAX_FAVORITE_INGREDIENTS = 20

_INSIGHT_CATEGORIES = 5
_INSIGHT_INGREDIENTS = 10


class UserProfileStore:
    """
    In-memory user preference profiles, updated from user behaviour.

    Rules:
    - ``view`` appends the viewed category.
    - ``order`` appends the cook and any ingredients not seen before.
    - ``favorite`` moves the category to the front (10 most recent kept) and
      pushes each unseen ingredient to the front (20 kept).
    - ``review`` with a rating of 4 or more appends the cook.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> UserProfile:
        with self._lock:
            profile = self._profiles.get(user_id)
            return profile.model_copy(deep=True) if profile else UserProfile(user_id=user_id)

    def load(self, user_id: str) -> UserProfile | None:
        """Stored profile for *user_id*, or None when nothing was recorded."""
        with self._lock:
            profile = self._profiles.get(user_id)
            return profile.model_copy(deep=True) if profile else None

    def set_location(self, user_id: str, location: Coordinates | None) -> UserProfile:
        with self._lock:
            profile = self._profiles.get(user_id) or UserProfile(user_id=user_id)
            profile = profile.model_copy(update={
                "location": location,
                "last_updated": datetime.now(timezone.utc),
            })
            self._profiles[user_id] = profile
            return profile.model_copy(deep=True)

    def record(self, user_id: str, event: BehaviorEvent) -> UserProfile:
        with self._lock:
            current = self._profiles.get(user_id) or UserProfile(user_id=user_id)
            categories = list(current.favorite_categories)
            ingredients = list(current.favorite_ingredients)
            cooks = list(current.preferred_cooks)

            if event.action == BehaviorAction.view:
                if event.category and event.category not in categories:
                    categories.append(event.category)
            elif event.action == BehaviorAction.order:
                if event.cook_id and event.cook_id not in cooks:
                    cooks.append(event.cook_id)
                for ingredient in event.ingredients:
                    if ingredient not in ingredients:
                        ingredients.append(ingredient)
            elif event.action == BehaviorAction.favorite:
                if event.category:
                    categories = [event.category] + [c for c in categories if c != event.category]
                    categories = categories[:_MAX_FAVORITE_CATEGORIES]
                for ingredient in event.ingredients:
                    if ingredient not in ingredients:
                        ingredients.insert(0, ingredient)
                ingredients = ingredients[:_MAX_FAVORITE_INGREDIENTS]
            elif event.action == BehaviorAction.review:
                if event.cook_id and (event.rating or 0) >= 4.0 and event.cook_id not in cooks:
                    cooks.append(event.cook_id)

            profile = current.model_copy(update={
                "favorite_categories": categories,
                "favorite_ingredients": ingredients,
                "preferred_cooks": cooks,
                "last_updated": datetime.now(timezone.utc),
            })
            self._profiles[user_id] = profile
            return profile.model_copy(deep=True)

    def insights(self, user_id: str) -> ProfileInsights:
        profile = self.get(user_id)
        return ProfileInsights(
            user_id=user_id,
            top_categories=profile.favorite_categories[:_INSIGHT_CATEGORIES],
            top_ingredients=profile.favorite_ingredients[:_INSIGHT_INGREDIENTS],
            preferred_cooks=profile.preferred_cooks,
        )

    def clear(self, user_id: str | None = None) -> None:
        with self._lock:
            if user_id is None:
                self._profiles.clear()
            else:
                self._profiles.pop(user_id, None)
