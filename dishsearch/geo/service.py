from __future__ import annotations

import math
from typing import Protocol

import numpy as np
from pydantic import BaseModel

from ..catalog.data_store import CatalogAccess
from ..catalog.models import Coordinates, Cook
from .config import DEFAULT_GEO_CONFIG, GeoConfig

EARTH_RADIUS_KM = 6371.0


class NearbyCook(BaseModel):
    cook: Cook
    distance_km: float


class DeliveryQuote(BaseModel):
    total_fee: float
    estimated_time_minutes: int


class GeoService(Protocol):
    async def get_nearby_cooks(
        self, latitude: float, longitude: float, radius_km: float,
    ) -> list[NearbyCook]: ...

    def calculate_delivery_fee(
        self, origin: Coordinates, destination: Coordinates,
    ) -> DeliveryQuote: ...


def haversine_km(
    lat: float, lng: float, lats: np.ndarray, lngs: np.ndarray,
) -> np.ndarray:
    """Great-circle distance from one point to many, rounded to 0.1 km."""
    lat1, lng1 = np.radians(lat), np.radians(lng)
    lat2, lng2 = np.radians(lats), np.radians(lngs)
    a = (
        np.sin((lat2 - lat1) / 2.0) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lng2 - lng1) / 2.0) ** 2
    )
    c = 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))
    return np.round(EARTH_RADIUS_KM * c, 1)


def distance_km(a: Coordinates, b: Coordinates) -> float:
    return float(
        haversine_km(a.latitude, a.longitude, np.array([b.latitude]), np.array([b.longitude]))[0]
    )


class HaversineGeoService:
    """
    Nearby-cook lookup over the catalog's cooks using straight-line distance.

    Stand-in for a geohash / maps backed service; same contract.
    """

    def __init__(self, catalog: CatalogAccess, config: GeoConfig = DEFAULT_GEO_CONFIG) -> None:
        self.catalog = catalog
        self.config = config

    async def get_nearby_cooks(
        self, latitude: float, longitude: float, radius_km: float,
    ) -> list[NearbyCook]:
        cooks = [c for c in await self.catalog.get_all_cooks() if c.location is not None]
        if not cooks:
            return []

        lats = np.array([c.location.latitude for c in cooks])
        lngs = np.array([c.location.longitude for c in cooks])
        distances = haversine_km(latitude, longitude, lats, lngs)

        nearby = [
            NearbyCook(cook=cook, distance_km=float(d))
            for cook, d in zip(cooks, distances)
            if d <= radius_km
        ]
        nearby.sort(key=lambda n: n.distance_km)
        return nearby

    def estimate_delivery_minutes(self, distance: float) -> int:
        travel = distance / self.config.average_speed_kmh * 60.0
        return math.ceil(self.config.base_delivery_minutes + travel)

    def calculate_delivery_fee(
        self, origin: Coordinates, destination: Coordinates,
    ) -> DeliveryQuote:
        d = distance_km(origin, destination)
        fee = self.config.base_delivery_fee + self.config.fee_per_km * d
        return DeliveryQuote(
            total_fee=float(round(fee)),
            estimated_time_minutes=self.estimate_delivery_minutes(d),
        )
