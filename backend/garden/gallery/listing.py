"""Gallery listings, the garden scene and the moderation flag."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from garden.categories import Category
from garden.layout.engine import LayoutPosition, layout
from garden.storage.base import GardenStore, SubmissionRecord

logger = logging.getLogger(__name__)

PAGE_SIZE = 200

# The garden scene only shows the newest plants.
GARDEN_LIMIT = 20


@dataclass
class Page:
    items: list[SubmissionRecord]
    total: int
    page: int
    page_size: int = PAGE_SIZE

    @property
    def pages(self) -> int:
        return max(1, -(-self.total // self.page_size))


@dataclass
class GardenScene:
    category: Category
    plants: list[SubmissionRecord] = field(default_factory=list)
    positions: list[LayoutPosition] = field(default_factory=list)


class GalleryService:
    def __init__(self, store: GardenStore) -> None:
        self.store = store

    async def list_public(self, category: Category, page: int = 0) -> Page:
        """Newest first, moderated records excluded."""
        return await self._page(category.public_view, page)

    async def list_all(self, category: Category, page: int = 0) -> Page:
        """Moderation view: full history, flagged records included."""
        return await self._page(category.table, page)

    async def garden(
        self,
        category: Category,
        limit: int = GARDEN_LIMIT,
        rng: np.random.Generator | None = None,
    ) -> GardenScene:
        rows = await self.store.select(category.public_view, offset=0, limit=limit)
        plants = [SubmissionRecord.from_row(r) for r in rows]
        return GardenScene(category=category, plants=plants, positions=layout(len(plants), rng))

    async def set_flag(self, category: Category, record_id: int) -> SubmissionRecord:
        """Hide a record from public views. Flagging twice is a no-op; there is no unflag."""
        row = await self.store.update(category.table, record_id, {"manual_moderation": True})
        logger.info("Moderated %s #%d", category.value, record_id)
        return SubmissionRecord.from_row(row)

    async def _page(self, table: str, page: int) -> Page:
        if page < 0:
            raise ValueError(f"page must be non-negative, got {page}")
        rows = await self.store.select(table, offset=page * PAGE_SIZE, limit=PAGE_SIZE)
        total = await self.store.count(table)
        return Page(items=[SubmissionRecord.from_row(r) for r in rows], total=total, page=page)
