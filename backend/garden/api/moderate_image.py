"""POST /api/moderate-image — score a drawing against the label set."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from garden.canvas.export import Artifact
from garden.classify.gateway import Classifier
from garden.dependencies import get_classifier, get_identity
from garden.models.requests import ImageDataRequest
from garden.models.responses import ModerateImageResponse

router = APIRouter()


def decode_image_data(image_data: str | None) -> Artifact:
    if not image_data:
        raise HTTPException(status_code=400, detail="No image data provided")
    try:
        return Artifact.from_data_uri(image_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.post("/moderate-image", response_model=ModerateImageResponse)
async def moderate_image(
    req: ImageDataRequest,
    classifier: Classifier = Depends(get_classifier),
    identity: str = Depends(get_identity),
) -> ModerateImageResponse:
    artifact = decode_image_data(req.image_data)
    verdict = await classifier.evaluate(artifact, identity)
    result = verdict.result
    return ModerateImageResponse(
        is_flower=result.is_flower,
        flower_probability=result.flower_probability,
        is_eggplant=result.is_eggplant,
        eggplant_probability=result.eggplant_probability,
        ip=verdict.identity,
        probabilities=dict(result.probabilities),
    )
