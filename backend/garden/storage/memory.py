"""In-process store for tests and local development.

Public views are derived from the raw tables on read, mirroring the
database views: ``public_<table>`` hides rows with ``manual_moderation``.
"""

from __future__ import annotations

import copy
import itertools
import logging
from typing import Any

from garden.canvas.export import PNG_CONTENT_TYPE
from garden.errors import RecordNotFound, UploadCollision
from garden.storage.base import GardenStore, UploadResult

logger = logging.getLogger(__name__)

_PUBLIC_PREFIX = "public_"


class MemoryStore(GardenStore):
    def __init__(self, base_url: str = "memory://garden") -> None:
        self.base_url = base_url.rstrip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self._ids = itertools.count(1)

    async def upload(
        self, data: bytes, filename: str, content_type: str = PNG_CONTENT_TYPE
    ) -> UploadResult:
        if filename in self.objects:
            raise UploadCollision(f"Object already exists: {filename}")
        self.objects[filename] = (data, content_type)
        return UploadResult(url=f"{self.base_url}/{filename}", path=filename)

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        stored = {**row, "id": next(self._ids)}
        self.tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    async def update(self, table: str, record_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        for row in self.tables.get(table, []):
            if row["id"] == record_id:
                row.update(fields)
                return copy.deepcopy(row)
        raise RecordNotFound(f"No record {record_id} in {table}")

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        rows = self._matching(table, filters)
        rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=descending)
        end = None if limit is None else offset + limit
        return [copy.deepcopy(r) for r in rows[offset:end]]

    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        return len(self._matching(table, filters))

    def _matching(self, table: str, filters: dict[str, Any] | None) -> list[dict[str, Any]]:
        if table.startswith(_PUBLIC_PREFIX):
            rows = [
                r for r in self.tables.get(table[len(_PUBLIC_PREFIX):], [])
                if not r.get("manual_moderation")
            ]
        else:
            rows = list(self.tables.get(table, []))
        for key, value in (filters or {}).items():
            rows = [r for r in rows if r.get(key) == value]
        return rows
