"""API response models. Field aliases keep the camelCase wire names."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    storage_backend: str = "memory"
    classifier_configured: bool = False


class ModerateImageResponse(_CamelModel):
    is_flower: bool = Field(..., alias="isFlower")
    flower_probability: float = Field(..., alias="flowerProbability")
    is_eggplant: bool = Field(..., alias="isEggplant")
    eggplant_probability: float = Field(..., alias="eggplantProbability")
    ip: str
    probabilities: dict[str, float] = Field(default_factory=dict)


class SaveImageResponse(BaseModel):
    url: str


class CaptionOut(_CamelModel):
    text: str
    follow_up: str | None = Field(None, alias="followUp")
    delay_s: float = Field(0.0, alias="delayS")


class SubmitResponse(_CamelModel):
    status: str
    category: str | None = None
    kind: str | None = None
    url: str | None = None
    confidence: float | None = None
    current_count: int | None = Field(None, alias="currentCount")
    detail: str = ""
    caption: CaptionOut | None = None


class RecordOut(BaseModel):
    id: int | None = None
    filename: str
    image_url: str
    confidence: float
    created_at: str
    manual_moderation: bool | None = None


class ModerationRecordOut(RecordOut):
    submitter_identity: str


class GalleryPageResponse(_CamelModel):
    category: str
    items: list[RecordOut] = Field(default_factory=list)
    total: int = 0
    page: int = 0
    page_size: int = Field(200, alias="pageSize")
    pages: int = 1


class ModerationPageResponse(GalleryPageResponse):
    items: list[ModerationRecordOut] = Field(default_factory=list)


class PositionOut(BaseModel):
    left: str
    top: str
    scale: float
    z_index: int


class PlantOut(BaseModel):
    record: RecordOut
    position: PositionOut


class GardenResponse(BaseModel):
    category: str
    plants: list[PlantOut] = Field(default_factory=list)
