"""API endpoint for roster sync."""

from fastapi import APIRouter, HTTPException

from huddle.core.logging import get_logger
from huddle.core.schemas_rosters import RosterSyncRequest, RosterSyncResponse
from huddle.services.roster_sync import sync_user_rosters

logger = get_logger(__name__)

router = APIRouter()


@router.post("/sync", response_model=RosterSyncResponse)
async def sync_rosters(request: RosterSyncRequest) -> RosterSyncResponse:
    """
    Pull the user's rosters for the given leagues from Sleeper.

    Raises:
        HTTPException 500: If storing a roster fails
    """
    try:
        return await sync_user_rosters(request.sleeper_user_id, request.league_ids)
    except Exception as e:
        logger.exception(f"Roster sync failed for user {request.sleeper_user_id}")
        raise HTTPException(status_code=500, detail="Failed to sync rosters") from e
