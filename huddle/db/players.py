"""Database operations for the player snapshot store (players_raw)."""

from datetime import datetime, timezone
from typing import Any, Iterable

from huddle.core.logging import get_logger
from huddle.core.schemas_players import PlayerSnapshot
from huddle.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "players_raw"

# PostgREST encodes .in_() filters in the URL; keep id lists short
ID_LOOKUP_CHUNK = 200
PAGE_SIZE = 1000

LIVE_COLUMNS = (
    "player_id, full_name, first_name, last_name, position, team, status, "
    "injury_status, injury_notes, practice_participation, "
    "depth_chart_position, depth_chart_order, news_updated, "
    "age, college, years_exp, rookie_year"
)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _chunks(items: list[str], size: int) -> Iterable[list[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def upsert_players(snapshots: list[PlayerSnapshot]) -> int:
    """
    Upsert a batch of player snapshots.

    Args:
        snapshots: Player snapshots to write

    Returns:
        Number of rows written

    Raises:
        Exception: If database operation fails
    """
    if not snapshots:
        return 0

    supabase = get_supabase()
    synced_at = _utc_now_iso()
    rows = [{**snapshot.to_row(), "last_synced": synced_at} for snapshot in snapshots]

    try:
        supabase.table(TABLE).upsert(rows, on_conflict="player_id").execute()
        logger.debug(f"Upserted {len(rows)} player snapshots")
        return len(rows)

    except Exception as e:
        logger.error(f"Failed to upsert player snapshots: {e}", extra={"count": len(rows)})
        raise


def get_players_by_ids(player_ids: list[str]) -> dict[str, PlayerSnapshot]:
    """
    Fetch live snapshots for exactly the given player ids.

    Args:
        player_ids: Player ids to look up

    Returns:
        Mapping of player id to snapshot (missing ids are absent)

    Raises:
        Exception: If database operation fails
    """
    if not player_ids:
        return {}

    supabase = get_supabase()
    unique_ids = list(dict.fromkeys(player_ids))
    found: dict[str, PlayerSnapshot] = {}

    try:
        for chunk in _chunks(unique_ids, ID_LOOKUP_CHUNK):
            response = supabase.table(TABLE).select(LIVE_COLUMNS).in_("player_id", chunk).execute()
            for row in response.data or []:
                snapshot = PlayerSnapshot.model_validate(row)
                found[snapshot.player_id] = snapshot

        return found

    except Exception as e:
        logger.error(f"Failed to fetch player snapshots: {e}", extra={"count": len(unique_ids)})
        raise


def list_player_stat_rows() -> list[dict[str, Any]]:
    """
    List the columns needed for roster-wide player statistics.

    Returns:
        List of row dicts (position, team, status, active, injury_status, last_synced)

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()
    rows: list[dict[str, Any]] = []

    try:
        offset = 0
        while True:
            response = (
                supabase.table(TABLE)
                .select("position, team, status, active, injury_status, last_synced")
                .range(offset, offset + PAGE_SIZE - 1)
                .execute()
            )
            page = response.data or []
            rows.extend(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        return rows

    except Exception as e:
        logger.error(f"Failed to list player stats: {e}")
        raise
