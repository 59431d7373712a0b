"""Tests for the admission state machine."""

from __future__ import annotations

import asyncio

import pytest

from garden.admission.controller import AdmissionController
from garden.admission.outcome import Accepted, Rejected, RejectionKind
from garden.admission.quota import LocalQuotaCounter
from garden.canvas.surface import CaptureSurface, Point
from garden.categories import Category
from garden.errors import CaptureUnavailable, ContentRejected, PersistenceFailure, QuotaExceeded
from garden.storage.memory import MemoryStore
from garden.storage.persistence import PersistenceAdapter, make_filename
from tests.conftest import (
    EGGPLANT_VECTOR,
    FLOWER_VECTOR,
    SCRIBBLE_VECTOR,
    FakeClassifier,
    make_artifact,
    run,
    seed_flowers,
)

IDENTITY = "203.0.113.7"


class CountingStore(MemoryStore):
    def __init__(self) -> None:
        super().__init__()
        self.count_calls = 0

    async def count(self, table, filters=None):
        self.count_calls += 1
        return await super().count(table, filters)


class SlowCountStore(MemoryStore):
    """Reads the count, then yields before returning it (stale read window)."""

    async def count(self, table, filters=None):
        value = await super().count(table, filters)
        await asyncio.sleep(0)
        return value


class BrokenInsertStore(MemoryStore):
    async def insert(self, table, row):
        raise PersistenceFailure("database unavailable")


def _controller(store, vector=FLOWER_VECTOR, counter=None, **kw) -> tuple[AdmissionController, FakeClassifier]:
    classifier = FakeClassifier(vector, **kw)
    return AdmissionController(classifier, PersistenceAdapter(store), local_counter=counter), classifier


def test_flower_accepted_and_recorded():
    store = MemoryStore()
    counter = LocalQuotaCounter()
    controller, _ = _controller(store, counter=counter)

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert isinstance(outcome, Accepted)
    assert outcome.category is Category.FLOWERS
    rows = store.tables["flowers"]
    assert len(rows) == 1
    assert "manual_moderation" not in rows[0]
    assert rows[0]["submitter_identity"] == IDENTITY
    assert rows[0]["image_url"] == outcome.url
    assert run(store.count("public_flowers")) == 1
    assert counter.count == 1


def test_eggplant_skips_quota():
    store = CountingStore()
    seed_flowers(store, IDENTITY, 10)
    controller, _ = _controller(store, EGGPLANT_VECTOR)

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert isinstance(outcome, Accepted)
    assert outcome.category is Category.EGGPLANTS
    assert outcome.confidence == 0.99
    assert store.count_calls == 0
    assert len(store.tables["eggplants"]) == 1
    assert outcome.caption.follow_up == "I guess this is more your speed? "


def test_eleventh_flower_rejected_by_server():
    store = MemoryStore()
    seed_flowers(store, IDENTITY, 10)
    counter = LocalQuotaCounter()
    controller, _ = _controller(store, counter=counter)

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert isinstance(outcome, Rejected)
    assert outcome.kind is RejectionKind.QUOTA_SERVER
    assert outcome.current_count == 10
    assert len(store.tables["flowers"]) == 10
    assert store.objects == {}
    assert counter.exhausted


def test_other_identities_do_not_count():
    store = MemoryStore()
    seed_flowers(store, "198.51.100.1", 10)
    controller, _ = _controller(store)
    assert isinstance(run(controller.submit(make_artifact(), IDENTITY)), Accepted)


def test_local_quota_short_circuits():
    store = MemoryStore()
    counter = LocalQuotaCounter()
    counter.saturate()
    controller, classifier = _controller(store, counter=counter)

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert outcome.kind is RejectionKind.QUOTA
    assert classifier.calls == 0


def test_classification_failure():
    store = MemoryStore()
    controller, _ = _controller(store, fail=True)

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert outcome.kind is RejectionKind.ERROR
    assert outcome.caption is None
    assert store.objects == {}


def test_content_rejected_with_timed_caption():
    store = MemoryStore()
    controller, _ = _controller(store, SCRIBBLE_VECTOR)

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert outcome.kind is RejectionKind.CONTENT
    assert outcome.caption.text == "That's not a flower. Try again? "
    assert outcome.caption.follow_up == "Add a flower to our garden? "
    assert outcome.caption.delay_s == 5.0
    assert store.tables == {}


def test_missing_artifact_is_capture_rejection():
    controller, classifier = _controller(MemoryStore())
    outcome = run(controller.submit(None, IDENTITY))
    assert outcome.kind is RejectionKind.CAPTURE
    assert classifier.calls == 0


def test_upload_collision_is_terminal():
    store = MemoryStore()
    ts = 1_700_000_000_000_000_000
    store.objects[make_filename(Category.FLOWERS, ts)] = (b"taken", "image/png")
    classifier = FakeClassifier(FLOWER_VECTOR)
    controller = AdmissionController(classifier, PersistenceAdapter(store, clock_ns=lambda: ts))

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert outcome.kind is RejectionKind.PERSISTENCE
    assert store.objects[make_filename(Category.FLOWERS, ts)] == (b"taken", "image/png")
    assert "flowers" not in store.tables


def test_failed_insert_leaves_orphan_object():
    store = BrokenInsertStore()
    controller, _ = _controller(store)

    outcome = run(controller.submit(make_artifact(), IDENTITY))

    assert outcome.kind is RejectionKind.PERSISTENCE
    assert len(store.objects) == 1
    assert store.tables == {}


def test_concurrent_submissions_can_overshoot_quota():
    store = SlowCountStore()
    seed_flowers(store, IDENTITY, 9)
    ticks = iter(range(1, 100))
    classifier = FakeClassifier(FLOWER_VECTOR)
    controller = AdmissionController(classifier, PersistenceAdapter(store, clock_ns=lambda: next(ticks)))

    async def both():
        return await asyncio.gather(
            controller.submit(make_artifact(), IDENTITY),
            controller.submit(make_artifact(), IDENTITY),
        )

    outcomes = run(both())

    assert all(isinstance(o, Accepted) for o in outcomes)
    assert len(store.tables["flowers"]) == 11


def test_submit_surface_disables_and_clears():
    store = MemoryStore()
    surface = CaptureSurface(device_pixel_ratio=2.0)
    surface.initialize()
    surface.begin(Point(10, 10))
    surface.extend(Point(150, 150))
    surface.end()

    seen = {}

    def on_call():
        seen["enabled"] = surface.enabled
        seen["blank"] = surface.buffer.getbbox() is None

    classifier = FakeClassifier(FLOWER_VECTOR, on_call=on_call)
    controller = AdmissionController(classifier, PersistenceAdapter(store))

    outcome = run(controller.submit_surface(surface, IDENTITY))

    assert isinstance(outcome, Accepted)
    assert seen == {"enabled": False, "blank": True}
    assert surface.enabled
    assert surface.buffer.getbbox() is None
    # The stored artifact still carries the drawing
    assert len(store.objects) == 1


def test_submit_surface_uninitialized():
    controller, classifier = _controller(MemoryStore())
    outcome = run(controller.submit_surface(CaptureSurface(), IDENTITY))
    assert outcome.kind is RejectionKind.CAPTURE
    assert classifier.calls == 0


def test_admit_raises_typed_errors():
    counter = LocalQuotaCounter()
    controller, _ = _controller(MemoryStore(), SCRIBBLE_VECTOR)

    with pytest.raises(CaptureUnavailable):
        run(controller._admit(None, IDENTITY))
    with pytest.raises(ContentRejected, match="flower"):
        run(controller._admit(make_artifact(), IDENTITY))

    counter.saturate()
    controller.local_counter = counter
    with pytest.raises(QuotaExceeded) as info:
        run(controller._admit(make_artifact(), IDENTITY))
    assert info.value.source == "local"
    assert info.value.current_count == 10
