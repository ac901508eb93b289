"""API endpoints for player and embedding store statistics."""

from fastapi import APIRouter, HTTPException

from huddle.core.logging import get_logger
from huddle.core.player_stats import (
    EmbeddingStats,
    PlayerStats,
    summarize_embeddings,
    summarize_players,
)
from huddle.db.player_embeddings import get_player_embedding, list_embedding_stat_rows
from huddle.db.players import list_player_stat_rows

logger = get_logger(__name__)

router = APIRouter()


@router.get("/stats", response_model=PlayerStats)
async def get_player_stats() -> PlayerStats:
    """Player counts by position, team and status."""
    try:
        return summarize_players(list_player_stat_rows())
    except Exception as e:
        logger.exception("Failed to compute player stats")
        raise HTTPException(status_code=500, detail="Failed to compute player stats") from e


@router.get("/embeddings/stats", response_model=EmbeddingStats)
async def get_embedding_stats() -> EmbeddingStats:
    """Embedding counts by reason and priority."""
    try:
        return summarize_embeddings(list_embedding_stat_rows())
    except Exception as e:
        logger.exception("Failed to compute embedding stats")
        raise HTTPException(status_code=500, detail="Failed to compute embedding stats") from e


@router.get("/{player_id}/embedding")
async def get_player_embedding_info(player_id: str) -> dict:
    """Stored identity embedding metadata for one player (vector omitted)."""
    try:
        record = get_player_embedding(player_id)
    except Exception as e:
        logger.exception(f"Failed to get embedding for player {player_id}")
        raise HTTPException(status_code=500, detail="Failed to get player embedding") from e

    if record is None:
        raise HTTPException(status_code=404, detail="Player has no embedding")

    return record.model_dump(exclude={"embedding"})
