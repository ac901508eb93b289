"""API endpoint for roster-aware fantasy advice."""

import asyncio

from fastapi import APIRouter, HTTPException

from huddle.chains.generate_advice import generate_advice
from huddle.core.config import get_settings
from huddle.core.context_assembler import assemble_context
from huddle.core.embeddings import embed_text_async
from huddle.core.errors import GenerationError, RetrievalError
from huddle.core.logging import get_logger
from huddle.core.prompt_builder import build_advice_prompt, describe_roster
from huddle.core.schemas_advice import AdviceContextStats, AdviceRequest, AdviceResponse
from huddle.db.rosters import get_owned_player_ids

logger = get_logger(__name__)

router = APIRouter()


async def _embed_query(query: str) -> list[float]:
    try:
        return await embed_text_async(query)
    except Exception as e:
        raise RetrievalError(f"Query embedding failed: {e}") from e


@router.post("/advice", response_model=AdviceResponse)
async def get_fantasy_advice(request: AdviceRequest) -> AdviceResponse:
    """
    Answer a fantasy question using stable embeddings plus live player status.

    This endpoint:
    1. Embeds the question and loads the user's rostered player ids
    2. Assembles ranked context (rostered players first, then up to 3 others)
    3. Builds the prompt and generates advice

    A question with no matching players still gets an answer, labeled as
    general advice.

    Raises:
        HTTPException 422: If the query is blank
        HTTPException 502: If retrieval or generation fails
        HTTPException 500: On unexpected errors
    """
    settings = get_settings()
    query = request.query.strip()
    if not query:
        raise HTTPException(status_code=422, detail="Query is required")

    user_id = request.sleeper_user_id

    try:
        owned_ids = await asyncio.to_thread(get_owned_player_ids, user_id) if user_id else set()
        query_embedding = await _embed_query(query)

        context = await asyncio.to_thread(
            assemble_context,
            query_embedding=query_embedding,
            owned_ids=owned_ids,
            similarity_threshold=settings.SIMILARITY_THRESHOLD,
            top_k=settings.MATCH_COUNT,
        )

        prompt = build_advice_prompt(
            query=query,
            items=context.items,
            summary_facts=context.summary_facts,
            roster_note=describe_roster(owned_ids),
        )
        advice = await generate_advice(prompt)

    except (RetrievalError, GenerationError) as e:
        logger.error(f"Advice pipeline failed: {e}", extra={"sleeper_user_id": user_id})
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error generating advice")
        raise HTTPException(status_code=500, detail="Failed to generate advice") from e

    items = context.items
    stats = AdviceContextStats(
        relevant_players_count=len(items),
        rostered_players=sum(1 for i in items if i.is_owned),
        injured_players=sum(1 for i in items if not i.is_healthy),
        starters=sum(1 for i in items if i.is_starter),
        real_time_updates=len(context.summary_facts),
    )

    logger.info(
        "Advice generated",
        extra={
            "sleeper_user_id": user_id or "anonymous",
            "players": stats.relevant_players_count,
            "rostered": stats.rostered_players,
        },
    )

    return AdviceResponse(
        query=query,
        advice=advice,
        advice_type="general" if context.is_empty else "personalized",
        context=stats,
        players=items,
        summary_facts=context.summary_facts,
    )
