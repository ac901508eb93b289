"""Sync a user's league rosters from Sleeper into user_rosters."""

from __future__ import annotations

from huddle.core.logging import get_logger
from huddle.core.schemas_rosters import LeagueSyncResult, RosterSyncResponse
from huddle.db.rosters import upsert_user_roster
from huddle.services.sleeper import get_sleeper_service

logger = get_logger(__name__)


async def sync_user_rosters(sleeper_user_id: str, league_ids: list[str]) -> RosterSyncResponse:
    """
    Fetch the user's roster in each league and store it.

    A league that cannot be fetched, or where the user owns no roster, is
    reported and skipped; the remaining leagues still sync.

    Args:
        sleeper_user_id: Sleeper user id
        league_ids: Sleeper league ids to sync

    Returns:
        RosterSyncResponse with a per-league outcome
    """
    sleeper = get_sleeper_service()
    results: list[LeagueSyncResult] = []

    for league_id in dict.fromkeys(league_ids):
        try:
            rosters = await sleeper.fetch_league_rosters(league_id)
        except Exception as e:
            logger.warning(f"Failed to fetch rosters for league {league_id}: {e}")
            results.append(LeagueSyncResult(league_id=league_id, synced=False, error=str(e)))
            continue

        roster = next((r for r in rosters if r.get("owner_id") == sleeper_user_id), None)
        if roster is None:
            logger.warning(f"User {sleeper_user_id} has no roster in league {league_id}")
            results.append(
                LeagueSyncResult(league_id=league_id, synced=False, error="user not in league")
            )
            continue

        upsert_user_roster(sleeper_user_id, league_id, roster)
        results.append(
            LeagueSyncResult(
                league_id=league_id,
                synced=True,
                player_count=len(roster.get("players") or []),
            )
        )

    synced = sum(1 for r in results if r.synced)
    logger.info(f"Synced {synced}/{len(results)} rosters for user {sleeper_user_id}")
    return RosterSyncResponse(sleeper_user_id=sleeper_user_id, rosters_synced=synced, leagues=results)
