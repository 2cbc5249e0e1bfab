from __future__ import annotations

from datetime import datetime
from enum import Enum

from ..catalog.models import Dish


class TimeOfDay(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    late_night = "late_night"


# Keywords matched (substring, lower-case) against a dish's category and tags.
TIME_KEYWORDS: dict[TimeOfDay, list[str]] = {
    TimeOfDay.breakfast: [
        "desayuno", "breakfast", "brunch", "café", "cafe", "panader",
        "huevo", "tostada", "fruta", "yogur", "pancake", "waffle",
    ],
    TimeOfDay.lunch: [
        "almuerzo", "lunch", "ensalada", "sandwich", "pasta", "arroz",
        "pollo", "casera", "menú", "cazuela", "bowl",
    ],
    TimeOfDay.dinner: [
        "cena", "dinner", "pizza", "carne", "parrilla", "sushi", "italiana",
        "japonesa", "mariscos", "pasta", "gourmet",
    ],
    TimeOfDay.late_night: [
        "bajón", "bajon", "snack", "hamburguesa", "burger", "pizza",
        "papas fritas", "empanada", "completo", "sandwich", "postre",
    ],
}

TIME_REASONS: dict[TimeOfDay, str] = {
    TimeOfDay.breakfast: "Ideal para el desayuno",
    TimeOfDay.lunch: "Ideal para el almuerzo",
    TimeOfDay.dinner: "Ideal para la cena",
    TimeOfDay.late_night: "Ideal para el bajón",
}


def time_of_day_for_hour(hour: int) -> TimeOfDay:
    if 6 <= hour <= 10:
        return TimeOfDay.breakfast
    if 11 <= hour <= 15:
        return TimeOfDay.lunch
    if 16 <= hour <= 22:
        return TimeOfDay.dinner
    return TimeOfDay.late_night


def time_of_day_at(moment: datetime) -> TimeOfDay:
    return time_of_day_for_hour(moment.hour)


def is_time_relevant(dish: Dish, time_of_day: TimeOfDay) -> bool:
    keywords = TIME_KEYWORDS[time_of_day]
    fields = [dish.category.lower(), *(t.lower() for t in dish.tags)]
    return any(k in f for k in keywords for f in fields)
