"""Moderation view and the one-way flag."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from garden.categories import Category
from garden.dependencies import get_gallery
from garden.gallery.listing import PAGE_SIZE, GalleryService
from garden.models.responses import ModerationPageResponse, ModerationRecordOut

router = APIRouter(prefix="/moderate")


@router.get("/{category}", response_model=ModerationPageResponse)
async def moderation_list(
    category: Category,
    page: int = Query(0, ge=0),
    service: GalleryService = Depends(get_gallery),
) -> ModerationPageResponse:
    result = await service.list_all(category, page)
    return ModerationPageResponse(
        category=category.value,
        items=[ModerationRecordOut(**asdict(r)) for r in result.items],
        total=result.total,
        page=result.page,
        page_size=PAGE_SIZE,
        pages=result.pages,
    )


@router.post("/{category}/{record_id}/flag", response_model=ModerationRecordOut)
async def flag(
    category: Category,
    record_id: int,
    service: GalleryService = Depends(get_gallery),
) -> ModerationRecordOut:
    record = await service.set_flag(category, record_id)
    return ModerationRecordOut(**asdict(record))
