"""Player ingestion: full snapshot sync plus selective, memoized embeddings.

Pipeline per run:
1. Fetch the Sleeper player universe (fatal if unavailable).
2. Upsert every snapshot into players_raw (cheap, unconditional).
3. Classify the in-scope players and keep the embedding-eligible ones.
4. Skip players whose stored content hash matches their current stable
   attributes; embed the rest in small concurrent batches with a pause
   between batches.
5. Age out embeddings of players missing from the universe.

Re-running with unchanged upstream data makes no embedding calls, so a
partially failed run is retried simply by running it again.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from huddle.core.config import Settings, get_settings
from huddle.core.eligibility import Eligibility, classify, priority_breakdown
from huddle.core.embeddings import embed_text_async
from huddle.core.logging import get_logger, log_with_context
from huddle.core.player_text import content_hash, render_identity_content
from huddle.core.schemas_players import EmbeddingRecord, PlayerSnapshot
from huddle.db.ingestion_jobs import (
    complete_ingestion_job,
    fail_ingestion_job,
    start_ingestion_job,
    update_ingestion_progress,
)
from huddle.db.player_embeddings import (
    get_embedding_hashes,
    sweep_absent_embeddings,
    upsert_player_embeddings,
)
from huddle.db.players import upsert_players
from huddle.services.sleeper import get_sleeper_service

logger = get_logger(__name__)

SCOPE_ALL = "all"
SCOPE_TARGETED = "targeted"
SCOPES = (SCOPE_ALL, SCOPE_TARGETED)

# Errors in these phases fail the run even though no player is counted as failed
RUN_LEVEL_PHASES = frozenset({"parse", "sync", "sweep"})


@dataclass
class IngestionError:
    """A unit of work that did not complete."""

    player_id: str | None
    phase: str  # parse | scope | sync | lookup | embed | store | sweep
    error: str


@dataclass
class IngestionResult:
    """Aggregate outcome of one ingestion run."""

    scope: str
    force: bool = False
    total_players: int = 0
    in_scope: int = 0
    synced: int = 0
    eligible: int = 0
    embedded: int = 0
    skipped: int = 0
    failed: int = 0
    stale_marked: int = 0
    stale_purged: int = 0
    priority_breakdown: dict[str, int] = field(default_factory=dict)
    estimated_cost_usd: float = 0.0
    estimated_savings_usd: float = 0.0
    errors: list[IngestionError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        run_failed = any(e.phase in RUN_LEVEL_PHASES for e in self.errors)
        return self.failed == 0 and not run_failed

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["success"] = self.success
        return data


@dataclass
class _PendingEmbedding:
    player: PlayerSnapshot
    eligibility: Eligibility
    content_hash: str


async def _pause(seconds: float) -> None:
    if seconds > 0:
        await asyncio.sleep(seconds)


def _report_progress(job_id: UUID | None, phase: str, processed: int, total: int) -> None:
    if job_id is None:
        return
    try:
        update_ingestion_progress(job_id, phase, processed, total)
    except Exception as e:
        # Progress is informational; the run itself carries on
        logger.warning(f"Progress update failed for job {job_id}: {e}")


def _parse_snapshots(
    universe: dict[str, dict[str, Any]],
    result: IngestionResult,
) -> list[PlayerSnapshot]:
    snapshots: list[PlayerSnapshot] = []
    for player_id, raw in universe.items():
        try:
            snapshots.append(PlayerSnapshot.from_sleeper(player_id, raw))
        except ValidationError as e:
            logger.warning(f"Skipping malformed player {player_id}: {e.error_count()} field errors")
            result.errors.append(
                IngestionError(player_id=str(player_id), phase="parse", error=str(e))
            )
    return snapshots


async def _sync_snapshots(
    snapshots: list[PlayerSnapshot],
    result: IngestionResult,
    settings: Settings,
    job_id: UUID | None,
) -> None:
    batch_size = max(1, settings.SNAPSHOT_BATCH_SIZE)
    total = len(snapshots)
    total_batches = (total + batch_size - 1) // batch_size

    for batch_num, start in enumerate(range(0, total, batch_size), start=1):
        batch = snapshots[start : start + batch_size]
        try:
            result.synced += upsert_players(batch)
        except Exception as e:
            logger.error(f"Snapshot batch {batch_num}/{total_batches} failed: {e}")
            result.errors.append(
                IngestionError(player_id=None, phase="sync", error=f"batch {batch_num}: {e}")
            )

        _report_progress(job_id, "syncing", min(start + batch_size, total), total)

        if start + batch_size < total:
            await _pause(settings.SNAPSHOT_BATCH_PAUSE_SECONDS)

    logger.info(f"Synced {result.synced}/{total} player snapshots")


def _select_scope(
    snapshots: list[PlayerSnapshot],
    scope: str,
    player_ids: list[str] | None,
    result: IngestionResult,
) -> list[PlayerSnapshot]:
    if scope == SCOPE_ALL:
        return snapshots

    by_id = {snapshot.player_id: snapshot for snapshot in snapshots}
    selected: list[PlayerSnapshot] = []
    for player_id in dict.fromkeys(str(pid) for pid in player_ids or []):
        snapshot = by_id.get(player_id)
        if snapshot is None:
            result.errors.append(
                IngestionError(player_id=player_id, phase="scope", error="not in upstream universe")
            )
            continue
        selected.append(snapshot)
    return selected


async def _embed_one(item: _PendingEmbedding, settings: Settings) -> EmbeddingRecord | IngestionError:
    player = item.player
    content = render_identity_content(player, settings.ROOKIE_SEASON)

    try:
        vector = await embed_text_async(content)
    except Exception as e:
        logger.warning(f"Embedding failed for {player.display_name} ({player.player_id}): {e}")
        return IngestionError(player_id=player.player_id, phase="embed", error=str(e))

    return EmbeddingRecord(
        player_id=player.player_id,
        content=content,
        embedding=vector,
        content_hash=item.content_hash,
        embed_priority=item.eligibility.priority,
        embed_reason=item.eligibility.reason,
        player_name=player.display_name,
        position=player.position,
        team=player.team,
    )


async def _embed_pending(
    pending: list[_PendingEmbedding],
    result: IngestionResult,
    settings: Settings,
    job_id: UUID | None,
    run_id: UUID,
) -> None:
    batch_size = max(1, settings.INGEST_BATCH_SIZE)
    total = len(pending)
    total_batches = (total + batch_size - 1) // batch_size

    for batch_num, start in enumerate(range(0, total, batch_size), start=1):
        batch = pending[start : start + batch_size]
        outcomes = await asyncio.gather(*(_embed_one(item, settings) for item in batch))

        records: list[EmbeddingRecord] = []
        for outcome in outcomes:
            if isinstance(outcome, IngestionError):
                result.errors.append(outcome)
                result.failed += 1
            else:
                records.append(outcome)

        if records:
            try:
                upsert_player_embeddings(records)
                result.embedded += len(records)
            except Exception as e:
                logger.error(f"Embedding batch {batch_num}/{total_batches} store failed: {e}")
                for record in records:
                    result.errors.append(
                        IngestionError(player_id=record.player_id, phase="store", error=str(e))
                    )
                result.failed += len(records)

        logger.debug(
            f"Embedding batch {batch_num}/{total_batches} done",
            extra={"run_id": str(run_id), "embedded": result.embedded, "failed": result.failed},
        )
        _report_progress(job_id, "embedding", min(start + batch_size, total), total)

        if start + batch_size < total:
            await _pause(settings.INGEST_BATCH_PAUSE_SECONDS)


async def ingest_players(
    scope: str = SCOPE_ALL,
    player_ids: list[str] | None = None,
    force: bool = False,
    job_id: UUID | None = None,
    run_id: UUID | None = None,
) -> IngestionResult:
    """
    Run one ingestion pass.

    Args:
        scope: "all" to consider every player, "targeted" for player_ids only
        player_ids: Players to consider when scope is "targeted"
        force: Re-embed eligible players even when their content hash is unchanged
        job_id: Optional job record to receive progress updates
        run_id: Run tracking UUID

    Returns:
        IngestionResult with counts and per-player errors

    Raises:
        ValueError: If scope is unknown or targeted scope has no player_ids
        UpstreamUnavailableError: If the Sleeper universe cannot be fetched
    """
    if scope not in SCOPES:
        raise ValueError(f"Unknown ingestion scope: {scope}")
    if scope == SCOPE_TARGETED and not player_ids:
        raise ValueError("Targeted ingestion requires player_ids")

    settings = get_settings()
    run_id = run_id or uuid.uuid4()
    result = IngestionResult(scope=scope, force=force)

    logger.info(
        f"Starting {scope} ingestion",
        extra={"run_id": str(run_id), "force": force, "targeted": len(player_ids or [])},
    )

    universe = await get_sleeper_service().fetch_all_players()
    snapshots = _parse_snapshots(universe, result)
    result.total_players = len(universe)

    await _sync_snapshots(snapshots, result, settings, job_id)

    scoped = _select_scope(snapshots, scope, player_ids, result)
    result.in_scope = len(scoped)

    candidates: list[tuple[PlayerSnapshot, Eligibility]] = []
    for snapshot in scoped:
        eligibility = classify(snapshot, settings.ROOKIE_SEASON)
        if eligibility.eligible:
            candidates.append((snapshot, eligibility))
    candidates.sort(key=lambda c: c[1].priority, reverse=True)

    result.eligible = len(candidates)
    result.priority_breakdown = priority_breakdown(e for _, e in candidates)

    try:
        stored_hashes = get_embedding_hashes([snapshot.player_id for snapshot, _ in candidates])
    except Exception as e:
        # Nothing can be skipped without stored hashes
        logger.error(f"Embedding hash lookup failed: {e}", extra={"run_id": str(run_id)})
        result.errors.append(IngestionError(player_id=None, phase="lookup", error=str(e)))
        result.failed += len(candidates)
        candidates = []
        stored_hashes = {}

    pending: list[_PendingEmbedding] = []
    for snapshot, eligibility in candidates:
        digest = content_hash(snapshot, settings.ROOKIE_SEASON)
        if not force and stored_hashes.get(snapshot.player_id) == digest:
            result.skipped += 1
            continue
        pending.append(_PendingEmbedding(snapshot, eligibility, digest))

    logger.info(
        f"Selected {len(pending)} players for embedding ({result.skipped} unchanged)",
        extra={
            "run_id": str(run_id),
            "estimated_cost_usd": round(len(pending) * settings.EMBEDDING_UNIT_COST, 4),
        },
    )

    await _embed_pending(pending, result, settings, job_id, run_id)

    _report_progress(job_id, "sweeping", 0, 1)
    try:
        result.stale_marked, result.stale_purged = sweep_absent_embeddings(
            set(universe), settings.STALE_EMBEDDING_MAX_MISSED_RUNS
        )
    except Exception as e:
        logger.error(f"Stale embedding sweep failed: {e}", extra={"run_id": str(run_id)})
        result.errors.append(IngestionError(player_id=None, phase="sweep", error=str(e)))

    result.estimated_cost_usd = round(result.embedded * settings.EMBEDDING_UNIT_COST, 6)
    result.estimated_savings_usd = round(result.skipped * settings.EMBEDDING_UNIT_COST, 6)

    log_with_context(
        logger,
        logging.INFO,
        "Ingestion finished",
        run_id=str(run_id),
        job_id=str(job_id) if job_id else None,
        synced=result.synced,
        eligible=result.eligible,
        embedded=result.embedded,
        skipped=result.skipped,
        failed=result.failed,
        success=result.success,
    )
    return result


async def run_ingestion_job(
    job_id: UUID,
    scope: str,
    player_ids: list[str] | None,
    force: bool,
    run_id: UUID,
) -> None:
    """Background entry point: drive ingest_players() and persist the outcome on the job."""
    try:
        start_ingestion_job(job_id)
        result = await ingest_players(
            scope=scope,
            player_ids=player_ids,
            force=force,
            job_id=job_id,
            run_id=run_id,
        )
        complete_ingestion_job(job_id, result.to_dict())

    except Exception as e:
        logger.exception(f"Ingestion job {job_id} failed", extra={"run_id": str(run_id)})
        try:
            fail_ingestion_job(job_id, str(e))
        except Exception:
            logger.exception(f"Could not mark ingestion job {job_id} as failed")
