"""Request/response schemas for roster sync."""

from pydantic import BaseModel, Field


class RosterSyncRequest(BaseModel):
    """Sync a user's rosters from Sleeper."""

    sleeper_user_id: str = Field(..., min_length=1)
    league_ids: list[str] = Field(..., min_length=1)


class LeagueSyncResult(BaseModel):
    """Outcome for one league."""

    league_id: str
    synced: bool
    player_count: int = 0
    error: str | None = None


class RosterSyncResponse(BaseModel):
    """Outcome of a roster sync."""

    sleeper_user_id: str
    rosters_synced: int
    leagues: list[LeagueSyncResult]
