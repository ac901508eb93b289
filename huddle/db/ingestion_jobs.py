"""Ingestion job lifecycle and progress records."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from huddle.core.logging import get_logger
from huddle.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "ingestion_jobs"


def _utc_now_iso() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def create_ingestion_job(input_json: dict[str, Any], run_id: UUID) -> UUID:
    """
    Create a new queued ingestion job.

    Args:
        input_json: Input parameters (scope, player_ids, force)
        run_id: Run tracking UUID

    Returns:
        Job UUID

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table(TABLE)
            .insert(
                {
                    "status": "queued",
                    "phase": "queued",
                    "processed": 0,
                    "total": 0,
                    "input": input_json,
                    "output": {},
                    "run_id": str(run_id),
                }
            )
            .execute()
        )

        if not response.data:
            raise ValueError("No data returned from create_ingestion_job")

        job_id = UUID(response.data[0]["id"])
        logger.info(
            f"Created ingestion job {job_id}",
            extra={"run_id": str(run_id), "job_id": str(job_id)},
        )
        return job_id

    except Exception as e:
        logger.error(f"Failed to create ingestion job: {e}", extra={"run_id": str(run_id)})
        raise


def start_ingestion_job(job_id: UUID) -> None:
    """
    Mark a job as processing.

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        supabase.table(TABLE).update(
            {
                "status": "processing",
                "phase": "fetching",
                "started_at": _utc_now_iso(),
            }
        ).eq("id", str(job_id)).execute()

        logger.info(f"Started ingestion job {job_id}", extra={"job_id": str(job_id)})

    except Exception as e:
        logger.error(f"Failed to start ingestion job: {e}", extra={"job_id": str(job_id)})
        raise


def update_ingestion_progress(job_id: UUID, phase: str, processed: int, total: int) -> None:
    """
    Record progress for a running job.

    Args:
        job_id: Job UUID
        phase: Current phase (fetching, syncing, embedding, sweeping)
        processed: Units of work finished in this phase
        total: Units of work in this phase

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        supabase.table(TABLE).update(
            {
                "phase": phase,
                "processed": processed,
                "total": total,
                "updated_at": _utc_now_iso(),
            }
        ).eq("id", str(job_id)).execute()

    except Exception as e:
        logger.error(f"Failed to update ingestion progress: {e}", extra={"job_id": str(job_id)})
        raise


def complete_ingestion_job(job_id: UUID, output_json: dict[str, Any]) -> None:
    """
    Mark a job as completed with its result summary.

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        supabase.table(TABLE).update(
            {
                "status": "completed",
                "phase": "done",
                "output": output_json,
                "completed_at": _utc_now_iso(),
            }
        ).eq("id", str(job_id)).execute()

        logger.info(f"Completed ingestion job {job_id}", extra={"job_id": str(job_id)})

    except Exception as e:
        logger.error(f"Failed to complete ingestion job: {e}", extra={"job_id": str(job_id)})
        raise


def fail_ingestion_job(job_id: UUID, error_message: str) -> None:
    """
    Mark a job as failed with error message.

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        supabase.table(TABLE).update(
            {
                "status": "failed",
                "error": error_message,
                "completed_at": _utc_now_iso(),
            }
        ).eq("id", str(job_id)).execute()

        logger.info(
            f"Failed ingestion job {job_id}: {error_message}", extra={"job_id": str(job_id)}
        )

    except Exception as e:
        logger.error(f"Failed to update job as failed: {e}", extra={"job_id": str(job_id)})
        raise


def get_ingestion_job(job_id: UUID) -> dict[str, Any] | None:
    """
    Get a job by ID.

    Returns:
        Job dict or None if not found

    Raises:
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = supabase.table(TABLE).select("*").eq("id", str(job_id)).execute()

        if response.data:
            return response.data[0]

        logger.warning(f"Ingestion job {job_id} not found")
        return None

    except Exception as e:
        logger.error(f"Failed to get ingestion job {job_id}: {e}")
        raise
