"""Flower quota: a best-effort per-identity cap, not an exact one.

The authoritative count lives in the raw ``flowers`` table. There is no lock
between counting and inserting, so concurrent submissions from one identity
can all pass a stale count.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from garden.categories import Category
from garden.errors import PersistenceFailure, QuotaExceeded
from garden.storage.base import GardenStore

logger = logging.getLogger(__name__)

FLOWER_QUOTA = 10

QUOTA_MESSAGE = f"You've reached the maximum of {FLOWER_QUOTA} flowers. Thank you for contributing!"


async def server_flower_count(store: GardenStore, identity: str) -> int:
    return await store.count(Category.FLOWERS.table, {"submitter_identity": identity})


async def check_server_quota(store: GardenStore, identity: str, limit: int = FLOWER_QUOTA) -> int:
    """Raise QuotaExceeded when ``identity`` already has ``limit`` flowers.

    A failed count query is logged and the submission is let through.
    Returns the count that was observed (-1 if it could not be read).
    """
    try:
        count = await server_flower_count(store, identity)
    except PersistenceFailure as e:
        logger.error("Quota count for %s failed, allowing submission: %s", identity, e)
        return -1
    if count >= limit:
        logger.warning("Quota exceeded for %s (%d/%d)", identity, count, limit)
        raise QuotaExceeded(count, limit, source="server")
    return count


class LocalQuotaCounter:
    """Client-side fast-path counter persisted as a small JSON file.

    Only ever an optimization in front of the server check. ``path=None``
    keeps the counter in memory.
    """

    def __init__(self, path: Path | None = None, limit: int = FLOWER_QUOTA) -> None:
        self.path = path
        self.limit = limit
        self._count = self._load()

    @property
    def count(self) -> int:
        return self._count

    @property
    def exhausted(self) -> bool:
        return self._count >= self.limit

    def increment(self) -> int:
        self._count += 1
        self._save()
        return self._count

    def saturate(self, observed: int | None = None) -> None:
        """Record a server-side rejection so later attempts stop locally."""
        self._count = max(self._count, self.limit, observed or 0)
        self._save()

    def _load(self) -> int:
        if self.path is None or not self.path.exists():
            return 0
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return int(data.get(Category.FLOWERS.value, 0))
        except (ValueError, TypeError, AttributeError):
            logger.warning("Ignoring unreadable quota file %s", self.path)
            return 0

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({Category.FLOWERS.value: self._count}), encoding="utf-8")
