"""Pydantic schemas for photo records."""

from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PhotoRecord(BaseModel):
    """A photo as held by the photo store.

    Built by the entry mapper for new photos and returned by the store for
    existing ones. ``tags`` and ``album`` are never set by import.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1, max_length=512, description="Feed entry GUID")
    source_url: str = Field(..., min_length=1, description="Feed URL the photo came from")
    title: str = Field(..., min_length=1)
    description: str | None = None
    taken_at: date_type = Field(..., description="Calendar date the photo was published")
    popularity: int = Field(default=0, ge=0)
    photo_url: str = Field(..., min_length=1)
    thumbnail_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    album: str | None = None


class PhotoResponse(PhotoRecord):
    """Response body for GET /photos/{photo_id}."""

    created_at: datetime | None = None
    updated_at: datetime | None = None
