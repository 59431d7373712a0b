"""Public listings and the garden scene."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from garden.categories import Category
from garden.dependencies import get_gallery
from garden.gallery.listing import GARDEN_LIMIT, PAGE_SIZE, GalleryService
from garden.models.responses import (
    GalleryPageResponse,
    GardenResponse,
    PlantOut,
    PositionOut,
    RecordOut,
)

router = APIRouter()


@router.get("/gallery/{category}", response_model=GalleryPageResponse)
async def gallery(
    category: Category,
    page: int = Query(0, ge=0),
    service: GalleryService = Depends(get_gallery),
) -> GalleryPageResponse:
    result = await service.list_public(category, page)
    return GalleryPageResponse(
        category=category.value,
        items=[RecordOut(**asdict(r)) for r in result.items],
        total=result.total,
        page=result.page,
        page_size=PAGE_SIZE,
        pages=result.pages,
    )


@router.get("/garden/{category}", response_model=GardenResponse)
async def garden(
    category: Category,
    limit: int = Query(GARDEN_LIMIT, ge=0, le=PAGE_SIZE),
    service: GalleryService = Depends(get_gallery),
) -> GardenResponse:
    scene = await service.garden(category, limit)
    return GardenResponse(
        category=category.value,
        plants=[
            PlantOut(
                record=RecordOut(**asdict(record)),
                position=PositionOut(
                    left=pos.left_css,
                    top=pos.top_css,
                    scale=pos.scale,
                    z_index=pos.z_index,
                ),
            )
            for record, pos in zip(scene.plants, scene.positions)
        ],
    )

