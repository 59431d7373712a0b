"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from garden.api import gallery, health, moderate_image, moderation, save_image, submit

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(moderate_image.router)
api_router.include_router(save_image.router)
api_router.include_router(submit.router)
api_router.include_router(gallery.router)
api_router.include_router(moderation.router)
