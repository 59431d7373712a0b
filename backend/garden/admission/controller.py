"""Admission controller — the per-attempt state machine.

    Start ─┬─ local counter ≥ limit ────────────────→ Rejected(quota)
           └─ classify ─┬─ failure ────────────────→ Rejected(error)
                        ├─ disallowed / no threshold → Rejected(content)
                        ├─ flower ─┬─ server count ≥ limit → Rejected(quota-server)
                        │          └─ persist ──────→ Accepted(flowers)
                        └─ eggplant ─ persist ──────→ Accepted(eggplants)

Every path is attempted once. Persistence failures after a positive
decision surface as Rejected(persistence).
"""

from __future__ import annotations

import logging

from garden.admission.outcome import Accepted, Outcome, Rejected, RejectionKind
from garden.admission.quota import FLOWER_QUOTA, LocalQuotaCounter, check_server_quota
from garden.canvas.export import Artifact, export
from garden.canvas.surface import CaptureSurface
from garden.categories import Category
from garden.classify.gateway import Classifier
from garden.classify.result import Decision
from garden.errors import (
    CaptureUnavailable,
    ClassificationFailure,
    ContentRejected,
    PersistenceFailure,
    QuotaExceeded,
)
from garden.storage.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

_CATEGORY_FOR = {
    Decision.FLOWER: Category.FLOWERS,
    Decision.EGGPLANT: Category.EGGPLANTS,
}


class AdmissionController:
    def __init__(
        self,
        classifier: Classifier,
        persistence: PersistenceAdapter,
        local_counter: LocalQuotaCounter | None = None,
        limit: int = FLOWER_QUOTA,
    ) -> None:
        self.classifier = classifier
        self.persistence = persistence
        self.local_counter = local_counter
        self.limit = limit

    async def submit(self, artifact: Artifact | None, identity: str) -> Outcome:
        try:
            return await self._admit(artifact, identity)
        except CaptureUnavailable as e:
            return Rejected(RejectionKind.CAPTURE, str(e))
        except QuotaExceeded as e:
            if e.source == "local":
                return Rejected(RejectionKind.QUOTA, str(e), current_count=e.current_count)
            if self.local_counter is not None:
                self.local_counter.saturate(e.current_count)
            return Rejected(RejectionKind.QUOTA_SERVER, str(e), current_count=e.current_count)
        except ClassificationFailure as e:
            logger.warning("Classification failed: %s", e)
            return Rejected(RejectionKind.ERROR, str(e))
        except ContentRejected as e:
            return Rejected(RejectionKind.CONTENT, str(e))
        except PersistenceFailure as e:
            return Rejected(RejectionKind.PERSISTENCE, str(e))

    async def _admit(self, artifact: Artifact | None, identity: str) -> Accepted:
        if artifact is None:
            raise CaptureUnavailable("capture surface not ready")

        if self.local_counter is not None and self.local_counter.count >= self.limit:
            logger.info("Local quota reached (%d); not contacting server", self.local_counter.count)
            raise QuotaExceeded(self.local_counter.count, self.limit, source="local")

        verdict = await self.classifier.evaluate(artifact, identity)
        result = verdict.result
        decision = result.decide()
        if decision is Decision.REJECTED:
            raise ContentRejected(
                f"top label {result.top_label!r}, flower {result.flower_probability:.3f}, "
                f"eggplant {result.eggplant_probability:.3f}"
            )

        category = _CATEGORY_FOR[decision]
        if category.has_quota:
            await check_server_quota(self.persistence.store, verdict.identity, self.limit)

        stored = await self.persistence.store_artifact(
            artifact, category, result.confidence, verdict.identity
        )
        if category.has_quota and self.local_counter is not None:
            self.local_counter.increment()
        return Accepted(category=category, confidence=result.confidence, stored=stored)

    async def submit_surface(self, surface: CaptureSurface, identity: str) -> Outcome:
        """Export, then keep the surface cleared and disabled until the attempt ends."""
        artifact = export(surface)
        if artifact is None:
            return await self.submit(None, identity)
        surface.disable()
        surface.clear()
        try:
            return await self.submit(artifact, identity)
        finally:
            surface.enable()
