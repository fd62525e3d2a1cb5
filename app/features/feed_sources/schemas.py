"""Pydantic schemas for feed source endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeedSourceCreate(BaseModel):
    """Request body for POST /feed-sources."""

    url: str = Field(..., min_length=1, max_length=2048, description="Media RSS feed URL")
    name: str | None = Field(None, max_length=255)
    enabled: bool = True

    @field_validator("url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        """Only http(s) feeds can be fetched."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("Feed URL must start with http:// or https://")
        return v


class FeedSourceResponse(BaseModel):
    """A registered feed source."""

    model_config = ConfigDict(from_attributes=True)

    url: str
    name: str | None = None
    enabled: bool
    created_at: datetime | None = None


class FeedSourceListResponse(BaseModel):
    """All registered feed sources."""

    sources: list[FeedSourceResponse]
    total: int = Field(..., ge=0)
