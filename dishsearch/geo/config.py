from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class GeoConfig:
    default_radius_km: float = float(os.getenv("DISHSEARCH_DEFAULT_RADIUS_KM", "15"))
    base_delivery_fee: float = float(os.getenv("DISHSEARCH_BASE_DELIVERY_FEE", "1500"))
    fee_per_km: float = float(os.getenv("DISHSEARCH_FEE_PER_KM", "500"))
    base_delivery_minutes: float = 15.0
    average_speed_kmh: float = 25.0


DEFAULT_GEO_CONFIG = GeoConfig()
