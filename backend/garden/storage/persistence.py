"""Persistence adapter — upload the artifact, then write exactly one record.

The two writes are not transactional. If the upload succeeds and the insert
fails, the object is left behind as an orphan (visible to moderation as an
image without a record). A record never exists without its object.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone

from garden.canvas.export import PNG_CONTENT_TYPE, Artifact
from garden.categories import Category
from garden.errors import PersistenceFailure, UploadCollision
from garden.storage.base import GardenStore, SubmissionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSubmission:
    url: str
    record: SubmissionRecord


def make_filename(category: Category, timestamp_ns: int) -> str:
    return f"{category.value}-{timestamp_ns}.png"


class PersistenceAdapter:
    def __init__(
        self,
        store: GardenStore,
        premoderated_identities: Iterable[str] = (),
        clock_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self.store = store
        self.premoderated_identities = frozenset(premoderated_identities)
        self._clock_ns = clock_ns

    async def store_png(
        self,
        data: bytes,
        category: Category,
        confidence: float,
        identity: str,
    ) -> StoredSubmission:
        filename = make_filename(category, self._clock_ns())

        try:
            upload = await self.store.upload(data, filename, PNG_CONTENT_TYPE)
        except UploadCollision:
            logger.error("Filename collision for %s; submission dropped", filename)
            raise
        except PersistenceFailure:
            logger.exception("Upload failed for %s", filename)
            raise

        record = SubmissionRecord(
            filename=filename,
            image_url=upload.url,
            confidence=confidence,
            submitter_identity=identity,
            created_at=datetime.now(timezone.utc).isoformat(),
            manual_moderation=True if identity in self.premoderated_identities else None,
        )
        try:
            row = await self.store.insert(category.table, record.to_row())
        except PersistenceFailure:
            logger.exception("Metadata write failed; %s is now an orphan object", filename)
            raise

        stored = SubmissionRecord.from_row(row)
        logger.info(
            "Planted %s #%s (confidence %.3f) from %s",
            category.value,
            stored.id,
            confidence,
            identity,
        )
        return StoredSubmission(url=upload.url, record=stored)

    async def store_artifact(
        self,
        artifact: Artifact,
        category: Category,
        confidence: float,
        identity: str,
    ) -> StoredSubmission:
        return await self.store_png(artifact.to_png(), category, confidence, identity)
