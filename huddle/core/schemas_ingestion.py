"""Request/response schemas for ingestion jobs."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class IngestionRequest(BaseModel):
    """Start an ingestion run."""

    scope: Literal["all", "targeted"] = Field(
        default="all", description="all: whole universe; targeted: player_ids only"
    )
    player_ids: list[str] | None = Field(
        default=None, description="Players to consider when scope is targeted"
    )
    force: bool = Field(default=False, description="Re-embed even when content is unchanged")

    @model_validator(mode="after")
    def _targeted_needs_ids(self) -> "IngestionRequest":
        if self.scope == "targeted" and not self.player_ids:
            raise ValueError("player_ids is required when scope is 'targeted'")
        return self


class IngestionJobResponse(BaseModel):
    """Handle for a queued ingestion job."""

    run_id: UUID
    job_id: UUID
    status: str = "queued"
