"""POST /api/save-image — quota check then upload + metadata write."""

from __future__ import annotations

import math

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from garden.admission.quota import check_server_quota
from garden.canvas.export import Artifact
from garden.categories import Category
from garden.dependencies import get_identity, get_persistence
from garden.models.responses import SaveImageResponse
from garden.storage.persistence import PersistenceAdapter

router = APIRouter()


def _parse_category(plant_type: str | None) -> Category:
    try:
        return Category(plant_type)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid plant type") from None


def _parse_probability(probability: str | None) -> float:
    try:
        value = float(probability) if probability is not None else math.nan
    except ValueError:
        value = math.nan
    if not math.isfinite(value) or not 0.0 < value <= 1.0:
        raise HTTPException(status_code=400, detail="invalid probability")
    return value


@router.post("/save-image", response_model=SaveImageResponse)
async def save_image(
    file: UploadFile | None = File(None),
    plant_type: str | None = Form(None, alias="plantType"),
    probability: str | None = Form(None),
    persistence: PersistenceAdapter = Depends(get_persistence),
    identity: str = Depends(get_identity),
) -> SaveImageResponse:
    if file is None:
        raise HTTPException(status_code=400, detail="invalid file")
    category = _parse_category(plant_type)
    confidence = _parse_probability(probability)
    try:
        artifact = Artifact.from_png(await file.read())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid file: {e}") from e

    if category.has_quota:
        await check_server_quota(persistence.store, identity)

    stored = await persistence.store_artifact(artifact, category, confidence, identity)
    return SaveImageResponse(url=stored.url)
