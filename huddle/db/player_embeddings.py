"""Database operations for selective player embeddings and vector search."""

from datetime import datetime, timezone
from typing import Any, Iterable

from huddle.core.logging import get_logger
from huddle.core.schemas_players import EmbeddingRecord, SimilarPlayer
from huddle.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "player_embeddings_selective"

ID_LOOKUP_CHUNK = 200
PAGE_SIZE = 1000


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _chunks(items: list[str], size: int) -> Iterable[list[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def get_player_embedding(player_id: str) -> EmbeddingRecord | None:
    """
    Get the embedding record for one player.

    Args:
        player_id: Player id

    Returns:
        EmbeddingRecord or None if the player has never been embedded

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = supabase.table(TABLE).select("*").eq("player_id", player_id).execute()

        if response.data:
            return EmbeddingRecord.model_validate(response.data[0])
        return None

    except Exception as e:
        logger.error(f"Failed to get embedding for player {player_id}: {e}")
        raise


def get_embedding_hashes(player_ids: list[str]) -> dict[str, str]:
    """
    Look up stored content hashes for a set of players in one pass.

    Args:
        player_ids: Player ids to look up

    Returns:
        Mapping of player id to stored content hash

    Raises:
        Exception: If database operation fails
    """
    if not player_ids:
        return {}

    supabase = get_supabase()
    hashes: dict[str, str] = {}

    try:
        for chunk in _chunks(list(dict.fromkeys(player_ids)), ID_LOOKUP_CHUNK):
            response = (
                supabase.table(TABLE)
                .select("player_id, content_hash")
                .in_("player_id", chunk)
                .execute()
            )
            for row in response.data or []:
                if row.get("content_hash"):
                    hashes[row["player_id"]] = row["content_hash"]

        return hashes

    except Exception as e:
        logger.error(f"Failed to fetch embedding hashes: {e}", extra={"count": len(player_ids)})
        raise


def upsert_player_embeddings(records: list[EmbeddingRecord]) -> int:
    """
    Upsert embedding records keyed by player id.

    Args:
        records: Embedding records to write

    Returns:
        Number of rows written

    Raises:
        Exception: If database operation fails
    """
    if not records:
        return 0

    supabase = get_supabase()
    embedded_at = _utc_now_iso()
    rows = [
        {**record.model_dump(), "missed_runs": 0, "embedding_created": embedded_at}
        for record in records
    ]

    try:
        supabase.table(TABLE).upsert(rows, on_conflict="player_id").execute()
        logger.debug(f"Upserted {len(rows)} player embeddings")
        return len(rows)

    except Exception as e:
        logger.error(f"Failed to upsert player embeddings: {e}", extra={"count": len(rows)})
        raise


def search_similar_players(
    query_embedding: list[float],
    similarity_threshold: float,
    match_count: int,
) -> list[SimilarPlayer]:
    """
    Search embedded players by cosine similarity.

    Args:
        query_embedding: Query embedding vector
        similarity_threshold: Minimum similarity (0-1)
        match_count: Maximum number of results

    Returns:
        Matches ordered by similarity descending

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = supabase.rpc(
            "search_similar_players",
            {
                "query_embedding": query_embedding,
                "similarity_threshold": similarity_threshold,
                "match_count": match_count,
            },
        ).execute()

        if not response.data:
            logger.info("No similar players found")
            return []

        logger.info(
            f"Found {len(response.data)} similar players",
            extra={"match_count": match_count, "similarity_threshold": similarity_threshold},
        )
        return [SimilarPlayer.model_validate(row) for row in response.data]

    except Exception as e:
        logger.error(f"Failed to search similar players: {e}")
        raise


def _list_all(columns: str) -> list[dict[str, Any]]:
    supabase = get_supabase()
    rows: list[dict[str, Any]] = []
    offset = 0
    while True:
        response = (
            supabase.table(TABLE)
            .select(columns)
            .order("player_id")
            .range(offset, offset + PAGE_SIZE - 1)
            .execute()
        )
        page = response.data or []
        rows.extend(page)
        if len(page) < PAGE_SIZE:
            return rows
        offset += PAGE_SIZE


def sweep_absent_embeddings(present_ids: set[str], max_missed_runs: int) -> tuple[int, int]:
    """
    Age out embeddings for players missing from the upstream universe.

    Absent players have missed_runs incremented; once it reaches
    max_missed_runs the record is deleted. Present players are reset to 0.

    Args:
        present_ids: Every player id in the current upstream universe
        max_missed_runs: Consecutive absences before a record is purged

    Returns:
        Tuple of (marked, purged)

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()
    marked = 0
    purged = 0

    try:
        rows = _list_all("player_id, missed_runs")
        to_purge: list[str] = []

        for row in rows:
            player_id = row["player_id"]
            missed = row.get("missed_runs") or 0

            if player_id in present_ids:
                if missed:
                    supabase.table(TABLE).update({"missed_runs": 0}).eq("player_id", player_id).execute()
                continue

            missed += 1
            if missed >= max_missed_runs:
                to_purge.append(player_id)
            else:
                supabase.table(TABLE).update({"missed_runs": missed}).eq("player_id", player_id).execute()
                marked += 1

        for chunk in _chunks(to_purge, ID_LOOKUP_CHUNK):
            supabase.table(TABLE).delete().in_("player_id", chunk).execute()
            purged += len(chunk)

        if marked or purged:
            logger.info(
                f"Stale embedding sweep: {marked} marked, {purged} purged",
                extra={"marked": marked, "purged": purged},
            )
        return marked, purged

    except Exception as e:
        logger.error(f"Failed to sweep stale embeddings: {e}")
        raise


def list_embedding_stat_rows() -> list[dict[str, Any]]:
    """
    List the columns needed for embedding statistics.

    Returns:
        List of row dicts (embed_reason, embed_priority, content, embedding_created)

    Raises:
        Exception: If database operation fails
    """
    try:
        return _list_all("player_id, embed_reason, embed_priority, content, embedding_created")
    except Exception as e:
        logger.error(f"Failed to list embedding stats: {e}")
        raise
