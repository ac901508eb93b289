"""Database operations for user rosters (the owner-set provider)."""

from datetime import datetime, timezone
from typing import Any

from huddle.core.logging import get_logger
from huddle.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "user_rosters"


def get_owned_player_ids(sleeper_user_id: str) -> set[str]:
    """
    Collect every player id on the user's rosters across all synced leagues.

    Args:
        sleeper_user_id: Sleeper user id

    Returns:
        Set of owned player ids (empty if the user has no synced rosters)

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table(TABLE)
            .select("league_id, player_ids")
            .eq("sleeper_user_id", sleeper_user_id)
            .execute()
        )

        owned: set[str] = set()
        for row in response.data or []:
            owned.update(str(pid) for pid in row.get("player_ids") or [])

        logger.debug(f"User {sleeper_user_id} owns {len(owned)} players")
        return owned

    except Exception as e:
        logger.error(f"Failed to fetch roster for user {sleeper_user_id}: {e}")
        raise


def upsert_user_roster(
    sleeper_user_id: str,
    league_id: str,
    roster: dict[str, Any],
) -> dict[str, Any]:
    """
    Upsert one league roster for a user.

    Args:
        sleeper_user_id: Sleeper user id
        league_id: Sleeper league id
        roster: Sleeper roster payload (roster_id, players, starters, reserve, taxi)

    Returns:
        Upserted row

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()
    row = {
        "sleeper_user_id": sleeper_user_id,
        "league_id": league_id,
        "sleeper_roster_id": roster.get("roster_id"),
        "player_ids": roster.get("players") or [],
        "starters": roster.get("starters") or [],
        "reserves": roster.get("reserve") or [],
        "taxi": roster.get("taxi") or [],
        "last_synced": datetime.now(timezone.utc).isoformat(),
    }

    try:
        response = (
            supabase.table(TABLE)
            .upsert(row, on_conflict="sleeper_user_id,league_id")
            .execute()
        )

        if not response.data:
            raise ValueError("No data returned from upsert_user_roster")

        return response.data[0]

    except Exception as e:
        logger.error(
            f"Failed to upsert roster for user {sleeper_user_id} in league {league_id}: {e}"
        )
        raise
