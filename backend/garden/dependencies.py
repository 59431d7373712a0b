"""FastAPI dependency injection.

Network clients are built once per process in the app lifespan and handed
to components; nothing reaches for a global client.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx
from fastapi import Depends, Request

from garden.admission.controller import AdmissionController
from garden.classify.gateway import Classifier, ReplicateClassifier
from garden.config import Settings, settings
from garden.gallery.listing import GalleryService
from garden.identity import derive_identity
from garden.storage.base import GardenStore
from garden.storage.memory import MemoryStore
from garden.storage.persistence import PersistenceAdapter
from garden.storage.supabase import SupabaseStore

logger = logging.getLogger(__name__)


@dataclass
class Resources:
    http: httpx.AsyncClient
    store: GardenStore
    classifier: Classifier

    async def aclose(self) -> None:
        await self.store.aclose()
        await self.http.aclose()


def build_resources(cfg: Settings) -> Resources:
    http = httpx.AsyncClient(timeout=cfg.classifier_timeout_s)
    if cfg.storage_backend == "supabase":
        store: GardenStore = SupabaseStore(
            http,
            url=cfg.supabase_url,
            service_key=cfg.supabase_service_key,
            bucket=cfg.storage_bucket,
            cache_control=cfg.storage_cache_control,
        )
    else:
        store = MemoryStore()
    classifier = ReplicateClassifier(
        http,
        api_token=cfg.replicate_api_token,
        model_version=cfg.classifier_model_version,
        base_url=cfg.replicate_base_url,
    )
    logger.info("Resources ready (storage=%s)", cfg.storage_backend)
    return Resources(http=http, store=store, classifier=classifier)


def get_settings() -> Settings:
    return settings


def get_resources(request: Request) -> Resources:
    resources = getattr(request.app.state, "resources", None)
    if resources is None:
        raise RuntimeError("App resources not initialized; the lifespan did not run")
    return resources


def get_store(resources: Resources = Depends(get_resources)) -> GardenStore:
    return resources.store


def get_classifier(resources: Resources = Depends(get_resources)) -> Classifier:
    return resources.classifier


def get_persistence(
    store: GardenStore = Depends(get_store),
    cfg: Settings = Depends(get_settings),
) -> PersistenceAdapter:
    return PersistenceAdapter(store, premoderated_identities=cfg.premoderated_identities)


def get_controller(
    classifier: Classifier = Depends(get_classifier),
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> AdmissionController:
    # Server side has no local fast-path counter; the store count is authoritative.
    return AdmissionController(classifier, persistence)


def get_gallery(store: GardenStore = Depends(get_store)) -> GalleryService:
    return GalleryService(store)


def get_identity(request: Request) -> str:
    """Derived once per request and passed downstream."""
    client_host = request.client.host if request.client else None
    return derive_identity(request.headers, client_host)
