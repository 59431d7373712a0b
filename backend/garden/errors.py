"""Error kinds raised along the submission pipeline.

Every error is terminal for the submission that raised it. Nothing in the
pipeline retries; only ``QuotaExceeded`` affects later submissions.
"""

from __future__ import annotations


class GardenError(Exception):
    """Base class for all pipeline errors."""


class CaptureUnavailable(GardenError):
    """The capture surface was never initialized."""


class ClassificationFailure(GardenError):
    """The classifier could not be reached or returned an unusable response."""


class QuotaExceeded(GardenError):
    """The submitter already planted the maximum number of flowers."""

    def __init__(self, current_count: int, limit: int, *, source: str = "server") -> None:
        self.current_count = current_count
        self.limit = limit
        self.source = source
        super().__init__(
            f"{source} quota exceeded: {current_count} of {limit} flowers already planted"
        )


class ContentRejected(GardenError):
    """Classification succeeded but no category threshold was met."""


class PersistenceFailure(GardenError):
    """Upload or metadata write failed."""


class UploadCollision(PersistenceFailure):
    """An object with the same filename already exists in the bucket."""


class RecordNotFound(GardenError):
    """No record with the requested id exists in the category table."""
