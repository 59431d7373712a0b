"""Health check."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from garden.config import Settings
from garden.dependencies import get_settings
from garden.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(cfg: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        storage_backend=cfg.storage_backend,
        classifier_configured=bool(cfg.replicate_api_token),
    )
