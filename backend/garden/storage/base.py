"""Storage boundary — object bucket plus structured tables.

Two table families exist per category: the raw table (``flowers``) and a
public view (``public_flowers``) that hides anything flagged
``manual_moderation``. Implementations never retry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any

from garden.canvas.export import PNG_CONTENT_TYPE


@dataclass(frozen=True)
class UploadResult:
    url: str
    path: str


@dataclass
class SubmissionRecord:
    """One admitted artifact. Mutated only by the moderation flag."""

    filename: str
    image_url: str
    confidence: float
    submitter_identity: str
    created_at: str
    manual_moderation: bool | None = None
    id: int | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> SubmissionRecord:
        return cls(
            id=row.get("id"),
            filename=row["filename"],
            image_url=row["image_url"],
            confidence=float(row["confidence"]),
            submitter_identity=row.get("submitter_identity") or "unknown",
            created_at=str(row["created_at"]),
            manual_moderation=row.get("manual_moderation"),
        )

    def to_row(self) -> dict[str, Any]:
        """Insert payload. ``id`` is assigned by the store; an unset flag stays absent."""
        row = asdict(self)
        row.pop("id")
        if row["manual_moderation"] is None:
            row.pop("manual_moderation")
        return row

    @property
    def is_public(self) -> bool:
        return not self.manual_moderation


class GardenStore(ABC):
    """Opaque persistent store: bucket upload plus insert/update/select/count."""

    @abstractmethod
    async def upload(
        self, data: bytes, filename: str, content_type: str = PNG_CONTENT_TYPE
    ) -> UploadResult:
        """Create a new object. Raises UploadCollision if the name is taken."""

    @abstractmethod
    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it with its assigned ``id``."""

    @abstractmethod
    async def update(self, table: str, record_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        """Update one row by id. Raises RecordNotFound."""

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str = "created_at",
        descending: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Equality-filtered, ordered, offset/limit page of rows."""

    @abstractmethod
    async def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        """Exact row count for the equality filters."""

    async def aclose(self) -> None:
        return None
