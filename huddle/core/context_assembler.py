"""Hybrid context assembly: stable embeddings + live filters + roster precedence.

Similarity search over identity embeddings finds the relevant players; their
live status (injury, practice, depth chart) comes from a single batched
snapshot lookup. Rostered players always come first, followed by at most
OTHER_CONTEXT_BUDGET non-rostered players in similarity order.

Usage:
    from huddle.core.context_assembler import assemble_context

    context = assemble_context(
        query_embedding=embedding,
        owned_ids={"4046", "6794"},
        similarity_threshold=0.1,
        top_k=15,
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field

from huddle.core.errors import RetrievalError
from huddle.core.logging import get_logger
from huddle.core.schemas_players import (
    ContextItem,
    PlayerSnapshot,
    SimilarPlayer,
    VolatileSummary,
)
from huddle.db.player_embeddings import search_similar_players
from huddle.db.players import get_players_by_ids

logger = get_logger(__name__)

# Non-rostered players admitted after the rostered ones
OTHER_CONTEXT_BUDGET = 3

HEALTHY_INJURY_STATUSES = frozenset({"", "healthy"})
FULL_PRACTICE_STATUSES = frozenset({"Full", "FP"})


@dataclass
class AssembledContext:
    """Ranked context items plus derived one-line facts."""

    items: list[ContextItem] = field(default_factory=list)
    summary_facts: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items


def _rank_candidates(
    matches: list[SimilarPlayer],
    similarity_threshold: float,
    top_k: int,
) -> list[SimilarPlayer]:
    """Enforce the search contract: threshold, descending score, cap, one row per player."""
    passing = [m for m in matches if m.similarity >= similarity_threshold]
    # sorted() is stable, so equal scores keep the store's order
    ranked = sorted(passing, key=lambda m: m.similarity, reverse=True)

    seen: set[str] = set()
    unique: list[SimilarPlayer] = []
    for match in ranked:
        if match.player_id in seen:
            continue
        seen.add(match.player_id)
        unique.append(match)
    return unique[: max(0, top_k)]


def is_healthy(snapshot: PlayerSnapshot | None) -> bool:
    status = (snapshot.injury_status if snapshot else None) or ""
    return status.strip().lower() in HEALTHY_INJURY_STATUSES


def _build_item(
    match: SimilarPlayer,
    snapshot: PlayerSnapshot | None,
    owned_ids: set[str],
) -> ContextItem:
    name = match.player_name or (snapshot.display_name if snapshot else match.player_id)
    volatile = VolatileSummary()
    if snapshot is not None:
        volatile = VolatileSummary(
            status=snapshot.status,
            injury_status=snapshot.injury_status,
            injury_notes=snapshot.injury_notes,
            practice_participation=snapshot.practice_participation,
            depth_chart_position=snapshot.depth_chart_position,
            depth_chart_order=snapshot.depth_chart_order,
            last_updated=snapshot.news_updated,
        )

    return ContextItem(
        player_id=match.player_id,
        player_name=name,
        position=match.position or (snapshot.position if snapshot else None),
        team=match.team or (snapshot.team if snapshot else None),
        identity_summary=match.content,
        volatile_summary=volatile,
        similarity=match.similarity,
        is_owned=match.player_id in owned_ids,
        is_starter=volatile.depth_chart_order == 1,
        is_healthy=is_healthy(snapshot),
    )


def apply_roster_precedence(items: list[ContextItem]) -> list[ContextItem]:
    """All owned items first, then at most OTHER_CONTEXT_BUDGET others, order preserved."""
    owned = [item for item in items if item.is_owned]
    other = [item for item in items if not item.is_owned]
    return owned + other[:OTHER_CONTEXT_BUDGET]


def derive_summary_facts(items: list[ContextItem]) -> list[str]:
    """One line per non-empty category: injuries, owned starters, practice concerns."""
    facts: list[str] = []

    injured = [item for item in items if not item.is_healthy]
    if injured:
        listed = ", ".join(f"{i.player_name} ({i.volatile_summary.injury_status})" for i in injured)
        facts.append(f"Injury updates: {listed}")

    starters = [item for item in items if item.is_owned and item.is_starter]
    if starters:
        listed = ", ".join(f"{i.player_name} (#1 {i.position or 'player'})" for i in starters)
        facts.append(f"Your starters: {listed}")

    practice = [
        item
        for item in items
        if item.volatile_summary.practice_participation
        and item.volatile_summary.practice_participation not in FULL_PRACTICE_STATUSES
    ]
    if practice:
        listed = ", ".join(
            f"{i.player_name} ({i.volatile_summary.practice_participation})" for i in practice
        )
        facts.append(f"Practice concerns: {listed}")

    return facts


def assemble_context(
    query_embedding: list[float],
    owned_ids: set[str],
    similarity_threshold: float,
    top_k: int,
) -> AssembledContext:
    """
    Assemble the prompt context for one advice query.

    Args:
        query_embedding: Embedding of the user's question
        owned_ids: Player ids on the user's roster (may be empty)
        similarity_threshold: Minimum cosine similarity for candidates
        top_k: Maximum candidates taken from similarity search

    Returns:
        AssembledContext; empty items and facts when nothing matches

    Raises:
        RetrievalError: If similarity search or the live snapshot lookup fails
    """
    try:
        matches = search_similar_players(query_embedding, similarity_threshold, top_k)
    except Exception as e:
        raise RetrievalError(f"Similarity search failed: {e}") from e

    candidates = _rank_candidates(matches, similarity_threshold, top_k)
    if not candidates:
        logger.info("No players above similarity threshold")
        return AssembledContext()

    try:
        snapshots = get_players_by_ids([c.player_id for c in candidates])
    except Exception as e:
        raise RetrievalError(f"Live player lookup failed: {e}") from e

    items = [_build_item(c, snapshots.get(c.player_id), owned_ids) for c in candidates]
    items = apply_roster_precedence(items)

    context = AssembledContext(items=items, summary_facts=derive_summary_facts(items))
    logger.info(
        f"Assembled context with {len(context.items)} players",
        extra={
            "candidates": len(candidates),
            "rostered": sum(1 for i in context.items if i.is_owned),
            "facts": len(context.summary_facts),
        },
    )
    return context
