"""API endpoints for player ingestion jobs."""

import uuid
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, HTTPException

from huddle.core.logging import get_logger
from huddle.core.schemas_ingestion import IngestionJobResponse, IngestionRequest
from huddle.db.ingestion_jobs import create_ingestion_job, get_ingestion_job
from huddle.services.ingestion_orchestrator import run_ingestion_job

logger = get_logger(__name__)

router = APIRouter()


@router.post("", response_model=IngestionJobResponse, status_code=202)
async def start_ingestion(
    request: IngestionRequest,
    background_tasks: BackgroundTasks,
) -> IngestionJobResponse:
    """
    Queue an ingestion run and return its job handle.

    Poll GET /ingestion/{job_id} for phase and progress.

    Raises:
        HTTPException 500: If the job record cannot be created
    """
    run_id = uuid.uuid4()

    try:
        job_id = create_ingestion_job(
            input_json=request.model_dump(),
            run_id=run_id,
        )
    except Exception as e:
        logger.exception("Failed to create ingestion job")
        raise HTTPException(status_code=500, detail="Failed to create ingestion job") from e

    background_tasks.add_task(
        run_ingestion_job,
        job_id=job_id,
        scope=request.scope,
        player_ids=request.player_ids,
        force=request.force,
        run_id=run_id,
    )

    logger.info(
        f"Queued {request.scope} ingestion",
        extra={"run_id": str(run_id), "job_id": str(job_id), "force": request.force},
    )
    return IngestionJobResponse(run_id=run_id, job_id=job_id)


@router.get("/{job_id}")
async def get_ingestion_status(job_id: UUID) -> dict:
    """
    Get ingestion job status, progress and result.

    Raises:
        HTTPException 404: If job not found
        HTTPException 500: If database error
    """
    try:
        job = get_ingestion_job(job_id)

        if not job:
            raise HTTPException(status_code=404, detail="Job not found")

        return job

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Failed to get ingestion job {job_id}")
        raise HTTPException(status_code=500, detail="Failed to retrieve job status") from e
