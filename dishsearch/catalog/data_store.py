from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, Protocol

from ..errors import UpstreamDataError
from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .ingest import normalize_cooks, normalize_dishes, read_records
from .models import Cook, Dish

logger = logging.getLogger(__name__)


class CatalogAccess(Protocol):
    """Read side of the document store, as seen by the engine."""

    async def get_all_dishes(self) -> list[Dish]: ...

    async def get_all_cooks(self) -> list[Cook]: ...


class InMemoryCatalog:
    """Catalog backed by already-normalized records."""

    def __init__(self, dishes: Iterable[Dish] = (), cooks: Iterable[Cook] = ()) -> None:
        self._dishes = tuple(dishes)
        self._cooks = tuple(cooks)

    async def get_all_dishes(self) -> list[Dish]:
        return list(self._dishes)

    async def get_all_cooks(self) -> list[Cook]:
        return list(self._cooks)


class FileCatalog:
    """
    Catalog backed by JSON/CSV snapshot files.

    Files are read on first use and kept until :meth:`reload` is called.
    Reads run in a worker thread so callers can await them like any other
    store round-trip.
    """

    def __init__(self, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> None:
        self.config = config
        self._dishes: tuple[Dish, ...] | None = None
        self._cooks: tuple[Cook, ...] | None = None

    def reload(self) -> None:
        self._dishes = None
        self._cooks = None

    async def get_all_dishes(self) -> list[Dish]:
        if self._dishes is None:
            records = await self._read(self.config.dishes_path)
            self._dishes = tuple(normalize_dishes(records))
        return list(self._dishes)

    async def get_all_cooks(self) -> list[Cook]:
        if self._cooks is None:
            records = await self._read(self.config.cooks_path)
            self._cooks = tuple(normalize_cooks(records))
        return list(self._cooks)

    @staticmethod
    async def _read(path: Path) -> list[dict]:
        try:
            return await asyncio.to_thread(read_records, path)
        except Exception as exc:
            logger.warning("Failed to read catalog file %s", path, exc_info=True)
            raise UpstreamDataError(f"could not read catalog file {path}") from exc
