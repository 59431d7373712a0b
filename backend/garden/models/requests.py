"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ImageDataRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_data: str | None = Field(
        None,
        alias="imageData",
        description="Exported 224×224 PNG as a data URI (or bare base64)",
    )
