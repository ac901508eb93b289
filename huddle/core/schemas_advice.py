"""Request/response schemas for the advice endpoint."""

from typing import Literal

from pydantic import BaseModel, Field

from huddle.core.schemas_players import ContextItem


class AdviceRequest(BaseModel):
    """Fantasy advice question."""

    query: str = Field(..., min_length=1, max_length=2000, description="User question")
    sleeper_user_id: str | None = Field(
        default=None, description="Sleeper user id; omit for general advice"
    )


class AdviceContextStats(BaseModel):
    """Counts describing the context the advice was grounded on."""

    relevant_players_count: int = 0
    rostered_players: int = 0
    injured_players: int = 0
    starters: int = 0
    real_time_updates: int = 0


class AdviceResponse(BaseModel):
    """Generated advice with the context it used."""

    success: bool = True
    query: str
    advice: str
    advice_type: Literal["personalized", "general"]
    context: AdviceContextStats
    players: list[ContextItem] = Field(default_factory=list)
    summary_facts: list[str] = Field(default_factory=list)
