"""
Normalization of raw store documents into canonical Dish / Cook records.

The document store returns duck-typed records: optional fields, camelCase
keys, prep times stored as strings, ratings as "4.5/5", tags as comma
separated strings, timestamps in several shapes.  Everything is normalized
here so the engine can rely on complete, well-typed records downstream.

Usage (convert a raw export into a canonical snapshot):
    python -m dishsearch.catalog.ingest raw_dishes.csv dishes.json dishes
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Mapping

import pandas as pd
from pydantic import ValidationError

from .models import Coordinates, Cook, Dish, parse_minutes

logger = logging.getLogger(__name__)


CANONICAL_DISH_COLUMNS: List[str] = [
    "id",
    "name",
    "description",
    "category",
    "tags",
    "ingredients",
    "allergens",
    "price",
    "rating",
    "review_count",
    "prep_time_minutes",
    "is_available",
    "cooker_id",
    "cooker_name",
    "created_at",
]

CANONICAL_COOK_COLUMNS: List[str] = [
    "id",
    "display_name",
    "rating",
    "cooking_style",
    "latitude",
    "longitude",
    "is_active",
    "specialties",
    "total_orders",
]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _first_present(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in raw and not _is_missing(raw[key]):
            return raw[key]
    return None


def _as_text(value: Any) -> str:
    return "" if _is_missing(value) else str(value).strip()


def _split_list(value: Any) -> list[str]:
    if _is_missing(value):
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        items = [value]
    return [str(item).strip() for item in items if str(item).strip()]


def _normalize_rating(rating: Any) -> float:
    if _is_missing(rating):
        return 0.0
    raw = str(rating).strip()
    # Handle "X/5" format (e.g. "4.1/5")
    if "/" in raw:
        raw = raw.split("/")[0].strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0

    # Clamp to [0, 5]
    return max(0.0, min(5.0, value))


def _normalize_number(value: Any, default: float = 0.0) -> float:
    if _is_missing(value):
        return default
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return default


def _normalize_bool(value: Any, default: bool = True) -> bool:
    if _is_missing(value):
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "si", "sí")
    return bool(value)


def _parse_timestamp(value: Any) -> datetime | None:
    """Accept datetimes, ISO strings, epoch seconds and ``{"seconds": ...}`` dicts."""
    if _is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        return _parse_timestamp(seconds)
    if isinstance(value, (int, float)):
        # Millisecond epochs are what the web client writes.
        seconds = value / 1000.0 if value > 1e11 else float(value)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    try:
        parsed = pd.Timestamp(str(value))
    except (TypeError, ValueError):
        return None
    if pd.isna(parsed):
        return None
    return _parse_timestamp(parsed)


def _normalize_location(raw: Mapping[str, Any]) -> Coordinates | None:
    location = raw.get("location")
    lat = lng = None
    if isinstance(location, Mapping):
        coords = location.get("coordinates", location)
        if isinstance(coords, Mapping):
            lat = coords.get("latitude", coords.get("lat"))
            lng = coords.get("longitude", coords.get("lng"))
    if lat is None or lng is None:
        lat = _first_present(raw, ["latitude", "lat"])
        lng = _first_present(raw, ["longitude", "lng"])
    if _is_missing(lat) or _is_missing(lng):
        return None
    try:
        return Coordinates(latitude=float(lat), longitude=float(lng))
    except (TypeError, ValueError, ValidationError):
        return None


def normalize_dish(raw: Mapping[str, Any]) -> Dish | None:
    """Map a raw dish document onto the canonical Dish, or ``None`` if unusable."""
    dish_id = _as_text(_first_present(raw, ["id", "dishId", "_id"]))
    if not dish_id:
        logger.warning("Skipping dish document without id: %r", dict(raw).get("name"))
        return None

    try:
        return Dish(
            id=dish_id,
            name=_as_text(raw.get("name")),
            description=_as_text(raw.get("description")),
            category=_as_text(raw.get("category")),
            tags=_split_list(raw.get("tags")),
            ingredients=_split_list(raw.get("ingredients")),
            allergens=_split_list(raw.get("allergens")),
            price=_normalize_number(raw.get("price")),
            rating=_normalize_rating(raw.get("rating")),
            review_count=int(_normalize_number(_first_present(raw, ["review_count", "reviewCount"]))),
            prep_time_minutes=parse_minutes(
                _first_present(raw, ["prep_time_minutes", "prepTime", "prep_time"])
            ),
            is_available=_normalize_bool(_first_present(raw, ["is_available", "isAvailable"])),
            cooker_id=_as_text(_first_present(raw, ["cooker_id", "cookerId"])),
            cooker_name=_as_text(_first_present(raw, ["cooker_name", "cookerName"])),
            created_at=_parse_timestamp(_first_present(raw, ["created_at", "createdAt"])),
        )
    except ValidationError:
        logger.warning("Skipping invalid dish document %s", dish_id, exc_info=True)
        return None


def normalize_cook(raw: Mapping[str, Any]) -> Cook | None:
    """Map a raw cook document onto the canonical Cook, or ``None`` if unusable."""
    cook_id = _as_text(_first_present(raw, ["id", "cookId", "uid", "_id"]))
    if not cook_id:
        logger.warning("Skipping cook document without id")
        return None

    try:
        return Cook(
            id=cook_id,
            display_name=_as_text(_first_present(raw, ["display_name", "displayName", "name"])),
            rating=_normalize_rating(raw.get("rating")),
            cooking_style=_as_text(_first_present(raw, ["cooking_style", "cookingStyle"])),
            location=_normalize_location(raw),
            is_active=_normalize_bool(_first_present(raw, ["is_active", "isActive"])),
            specialties=_split_list(raw.get("specialties")),
            total_orders=int(_normalize_number(_first_present(raw, ["total_orders", "totalOrders"]))),
        )
    except ValidationError:
        logger.warning("Skipping invalid cook document %s", cook_id, exc_info=True)
        return None


def normalize_dishes(records: Iterable[Mapping[str, Any]]) -> list[Dish]:
    return [d for d in (normalize_dish(r) for r in records) if d is not None]


def normalize_cooks(records: Iterable[Mapping[str, Any]]) -> list[Cook]:
    return [c for c in (normalize_cook(r) for r in records) if c is not None]


def read_records(path: Path) -> list[dict[str, Any]]:
    """Read a JSON (list of documents) or CSV file into plain dict records."""
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path)
    else:
        df = pd.read_json(path, orient="records", dtype=False)
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def _dish_row(dish: Dish) -> dict[str, Any]:
    row = dish.model_dump(mode="json")
    return {col: row[col] for col in CANONICAL_DISH_COLUMNS}


def _cook_row(cook: Cook) -> dict[str, Any]:
    row = cook.model_dump(mode="json")
    location = row.pop("location") or {}
    row["latitude"] = location.get("latitude")
    row["longitude"] = location.get("longitude")
    return {col: row[col] for col in CANONICAL_COOK_COLUMNS}


def run_ingestion(raw_path: Path, output_path: Path, kind: str = "dishes") -> Path:
    """
    Normalize a raw store export into a canonical snapshot.

    Steps:
    - Read raw documents (JSON or CSV).
    - Map them into the canonical Dish or Cook schema, dropping unusable rows.
    - Persist the cleaned records as JSON for the file-backed catalog.
    """
    records = read_records(raw_path)
    if kind == "cooks":
        rows = [_cook_row(c) for c in normalize_cooks(records)]
        columns = CANONICAL_COOK_COLUMNS
    else:
        rows = [_dish_row(d) for d in normalize_dishes(records)]
        columns = CANONICAL_DISH_COLUMNS

    output_path.parent.mkdir(parents=True, exist_ok=True)
    canonical = pd.DataFrame(rows, columns=columns)
    canonical.to_json(output_path, orient="records", force_ascii=False, indent=2)
    logger.info("Normalized %d of %d %s records", len(rows), len(records), kind)
    return output_path


if __name__ == "__main__":
    src, dst = Path(sys.argv[1]), Path(sys.argv[2])
    path = run_ingestion(src, dst, sys.argv[3] if len(sys.argv) > 3 else "dishes")
    print(f"Ingestion complete. Canonical data saved to: {path}")
