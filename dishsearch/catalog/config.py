from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Location of the catalog snapshot files.

    Both JSON (list of documents) and CSV files are accepted; the format is
    picked from the file suffix.
    """

    dishes_path: Path = Path(os.getenv("DISHSEARCH_DISHES_PATH", str(_DATA_DIR / "dishes.json")))
    cooks_path: Path = Path(os.getenv("DISHSEARCH_COOKS_PATH", str(_DATA_DIR / "cooks.json")))


DEFAULT_CATALOG_CONFIG = CatalogConfig()
