"""Classifier gateway — CLIP zero-shot scoring over the fixed label set.

One request per artifact, no polling and no retry: any transport error,
non-2xx status, unfinished prediction or malformed output becomes a
ClassificationFailure and ends the submission.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

from garden.canvas.export import Artifact
from garden.classify.labels import classifier_prompt
from garden.classify.result import ClassificationResult
from garden.errors import ClassificationFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    """A classification paired with the identity of the request that asked for it."""

    result: ClassificationResult
    identity: str


class Classifier(ABC):
    """Opaque scoring function: artifact → per-label probabilities."""

    @abstractmethod
    async def classify(self, artifact: Artifact) -> ClassificationResult: ...

    async def evaluate(self, artifact: Artifact, identity: str) -> Verdict:
        """Classify and carry the already-derived request identity forward."""
        result = await self.classify(artifact)
        logger.info(
            "Classified artifact for %s: %s",
            identity,
            {label: round(p, 4) for label, p in result.probabilities.items()},
        )
        return Verdict(result=result, identity=identity)


class ReplicateClassifier(Classifier):
    """CLIP ViT-L/14 hosted on Replicate, called synchronously via ``Prefer: wait``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_token: str,
        model_version: str,
        base_url: str = "https://api.replicate.com/v1",
    ) -> None:
        self._client = client
        self._api_token = api_token
        self._model_version = model_version
        self._base_url = base_url.rstrip("/")

    def build_payload(self, artifact: Artifact) -> dict[str, Any]:
        return {
            "version": self._model_version,
            "input": {
                "text": classifier_prompt(),
                "image": artifact.to_data_uri(),
            },
        }

    async def classify(self, artifact: Artifact) -> ClassificationResult:
        if not self._api_token:
            raise ClassificationFailure("Classifier not configured: set REPLICATE_API_TOKEN")

        try:
            response = await self._client.post(
                f"{self._base_url}/predictions",
                json=self.build_payload(artifact),
                headers={
                    "Authorization": f"Bearer {self._api_token}",
                    "Prefer": "wait",
                },
            )
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Classifier returned HTTP %s", e.response.status_code)
            raise ClassificationFailure(f"Classifier HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Classifier unreachable: %s", e)
            raise ClassificationFailure(f"Classifier unreachable: {e}") from e
        except ValueError as e:
            raise ClassificationFailure(f"Classifier returned invalid JSON: {e}") from e

        if not isinstance(body, dict):
            raise ClassificationFailure(f"Unexpected classifier response: {body!r}")
        status = body.get("status")
        if status != "succeeded":
            raise ClassificationFailure(
                f"Prediction {body.get('id', '?')} not finished (status={status!r}): {body.get('error')}"
            )

        output = body.get("output")
        if not isinstance(output, list):
            raise ClassificationFailure(f"Unexpected classifier output: {output!r}")
        try:
            return ClassificationResult.from_vector(output)
        except (TypeError, ValueError) as e:
            raise ClassificationFailure(str(e)) from e
