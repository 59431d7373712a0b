"""POST /api/submit — run the whole admission pipeline server-side."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from garden.admission.controller import AdmissionController
from garden.admission.outcome import Accepted, Outcome
from garden.api.moderate_image import decode_image_data
from garden.dependencies import get_controller, get_identity
from garden.models.requests import ImageDataRequest
from garden.models.responses import CaptionOut, SubmitResponse

router = APIRouter()


def outcome_to_response(outcome: Outcome) -> SubmitResponse:
    caption = outcome.caption
    caption_out = (
        CaptionOut(text=caption.text, follow_up=caption.follow_up, delay_s=caption.delay_s)
        if caption is not None
        else None
    )
    if isinstance(outcome, Accepted):
        return SubmitResponse(
            status="accepted",
            category=outcome.category.value,
            url=outcome.url,
            confidence=outcome.confidence,
            caption=caption_out,
        )
    return SubmitResponse(
        status="rejected",
        kind=outcome.kind.value,
        current_count=outcome.current_count,
        detail=outcome.detail,
        caption=caption_out,
    )


@router.post("/submit", response_model=SubmitResponse)
async def submit(
    req: ImageDataRequest,
    controller: AdmissionController = Depends(get_controller),
    identity: str = Depends(get_identity),
) -> SubmitResponse:
    artifact = decode_image_data(req.image_data)
    outcome = await controller.submit(artifact, identity)
    return outcome_to_response(outcome)
