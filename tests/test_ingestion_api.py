"""Tests for ingestion job endpoints."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient

from huddle.main import app

client = TestClient(app)

MODULE = "huddle.api.ingestion"


def test_start_ingestion_queues_background_run():
    job_id = uuid4()

    with (
        patch(f"{MODULE}.create_ingestion_job", return_value=job_id) as mock_create,
        patch(f"{MODULE}.run_ingestion_job", new_callable=AsyncMock) as mock_run,
    ):
        response = client.post("/v1/ingestion", json={"scope": "all", "force": True})

    assert response.status_code == 202
    data = response.json()
    assert data["job_id"] == str(job_id)
    assert data["status"] == "queued"

    assert mock_create.call_args.kwargs["input_json"] == {
        "scope": "all",
        "player_ids": None,
        "force": True,
    }
    kwargs = mock_run.call_args.kwargs
    assert kwargs["job_id"] == job_id
    assert kwargs["force"] is True
    assert str(kwargs["run_id"]) == data["run_id"]


def test_targeted_ingestion_requires_player_ids():
    with patch(f"{MODULE}.create_ingestion_job") as mock_create:
        response = client.post("/v1/ingestion", json={"scope": "targeted"})

    assert response.status_code == 422
    mock_create.assert_not_called()


def test_unknown_scope_rejected():
    response = client.post("/v1/ingestion", json={"scope": "everything"})
    assert response.status_code == 422


def test_job_creation_failure_is_500():
    with patch(f"{MODULE}.create_ingestion_job", side_effect=RuntimeError("db down")):
        response = client.post("/v1/ingestion", json={})

    assert response.status_code == 500


def test_get_ingestion_status():
    job_id = uuid4()
    job = {"id": str(job_id), "status": "processing", "phase": "embedding", "processed": 5, "total": 40}

    with patch(f"{MODULE}.get_ingestion_job", return_value=job) as mock_get:
        response = client.get(f"/v1/ingestion/{job_id}")

    assert response.status_code == 200
    assert response.json()["phase"] == "embedding"
    mock_get.assert_called_once_with(job_id)


def test_get_ingestion_status_not_found():
    with patch(f"{MODULE}.get_ingestion_job", return_value=None):
        response = client.get(f"/v1/ingestion/{uuid4()}")

    assert response.status_code == 404


def test_ingestion_job_db_mock():
    from huddle.db.ingestion_jobs import create_ingestion_job, update_ingestion_progress

    job_id, run_id = uuid4(), uuid4()
    with patch("huddle.db.ingestion_jobs.get_supabase") as mock_supabase:
        table = mock_supabase.return_value.table.return_value
        table.insert.return_value.execute.return_value.data = [{"id": str(job_id)}]

        assert create_ingestion_job({"scope": "all"}, run_id) == job_id
        update_ingestion_progress(job_id, "embedding", 5, 10)

        mock_supabase.return_value.table.assert_called_with("ingestion_jobs")
        update = table.update.call_args.args[0]
        assert (update["phase"], update["processed"], update["total"]) == ("embedding", 5, 10)
