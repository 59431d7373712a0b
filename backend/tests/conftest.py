"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from garden.canvas.export import EXPORT_SIZE, Artifact
from garden.classify.gateway import Classifier
from garden.classify.result import ClassificationResult
from garden.errors import ClassificationFailure
from garden.storage.memory import MemoryStore


# Probability vectors, positionally matched to garden.classify.labels.LABELS:
# flower, flower sketch, flower artwork, penis, doodle, object, swastika,
# handwriting, text, the word flower.

FLOWER_VECTOR = [0.95, 0.02, 0.01, 0.0, 0.01, 0.01, 0.0, 0.0, 0.0, 0.0]
EGGPLANT_VECTOR = [0.04, 0.03, 0.03, 0.99, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0]
SCRIBBLE_VECTOR = [0.3, 0.2, 0.1, 0.1, 0.2, 0.1, 0.0, 0.0, 0.0, 0.0]
SWASTIKA_VECTOR = [0.0, 0.0, 0.0, 0.0, 0.02, 0.03, 0.9, 0.0, 0.05, 0.0]


def make_artifact(color: tuple[int, int, int, int] = (0, 0, 0, 0)) -> Artifact:
    return Artifact(image=Image.new("RGBA", (EXPORT_SIZE, EXPORT_SIZE), color))


def artifact_png() -> bytes:
    return make_artifact((231, 76, 60, 255)).to_png()


def run(coro):
    return asyncio.run(coro)


class FakeClassifier(Classifier):
    """Returns a fixed vector (or raises) and records every call."""

    def __init__(
        self,
        vector: Sequence[float] | None = None,
        fail: bool = False,
        on_call: Callable[[], None] | None = None,
    ) -> None:
        self.vector = list(vector) if vector is not None else list(FLOWER_VECTOR)
        self.fail = fail
        self.on_call = on_call
        self.calls = 0

    async def classify(self, artifact: Artifact) -> ClassificationResult:
        self.calls += 1
        if self.on_call is not None:
            self.on_call()
        await asyncio.sleep(0)
        if self.fail:
            raise ClassificationFailure("classifier down")
        return ClassificationResult.from_vector(self.vector)


def seed_flowers(store: MemoryStore, identity: str, n: int) -> None:
    rows = store.tables.setdefault("flowers", [])
    for i in range(n):
        rows.append(
            {
                "id": 10_000 + i,
                "filename": f"flowers-seed-{i}.png",
                "image_url": f"memory://garden/flowers-seed-{i}.png",
                "confidence": 0.95,
                "submitter_identity": identity,
                "created_at": f"2026-01-01T00:00:{i:02d}+00:00",
            }
        )


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier(FLOWER_VECTOR)


@pytest.fixture
def client(store: MemoryStore, classifier: FakeClassifier):
    from garden.dependencies import get_classifier, get_store
    from garden.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_classifier] = lambda: classifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
