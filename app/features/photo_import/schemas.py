"""Pydantic schemas for photo import runs and refresh."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class EntryOutcome(str, Enum):
    """What happened to one feed entry during an import run."""

    CREATED = "created"
    SKIPPED_EXISTING = "skipped_existing"
    MAPPING_FAILED = "mapping_failed"
    CREATE_FAILED = "create_failed"


class ImportEntryError(BaseModel):
    """Error detail for a single entry that could not be imported."""

    entry_index: int = Field(..., ge=0, description="0-based position of the entry in the feed")
    entry_id: str | None = Field(None, description="Entry GUID, if the entry had one")
    outcome: EntryOutcome = Field(..., description="mapping_failed or create_failed")
    error_message: str = Field(..., description="Human-readable cause")


class ImportSummary(BaseModel):
    """Result of one import run over one feed."""

    feed_url: str
    fetch_failed: bool = Field(
        default=False,
        description="True if the feed itself could not be fetched; no entries were processed",
    )
    fetch_error: str | None = None
    created: int = Field(default=0, ge=0, description="New photos stored")
    skipped: int = Field(default=0, ge=0, description="Entries already in the store")
    failed: int = Field(default=0, ge=0, description="Entries that could not be mapped or stored")
    errors: list[ImportEntryError] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        """Entries looked at in this run."""
        return self.created + self.skipped + self.failed


class ImportRunRequest(BaseModel):
    """Request body for POST /imports/runs."""

    feed_url: str = Field(..., min_length=1, max_length=2048)

    @field_validator("feed_url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        """Only http(s) feeds can be fetched."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("Feed URL must start with http:// or https://")
        return v


class RefreshResult(BaseModel):
    """Result of fanning out imports over all feed sources."""

    enqueued: int = Field(default=0, ge=0, description="New import jobs created")
    deduplicated: int = Field(
        default=0,
        ge=0,
        description="Sources skipped because an import was already pending or running",
    )

    @property
    def sources(self) -> int:
        """Feed sources visited."""
        return self.enqueued + self.deduplicated
