"""
Tests for job endpoints:
- GET /job/{job_id}
- GET /jobs

Covers:
- Job state, progress and result in camelCase
- Probe across queues without worker
- Pagination
- Error mapping (400, 404, 503)
"""

from unittest.mock import patch

from fastapi import status

from sheetjobs.application.ports.job_queue import QueueConnectionError
from sheetjobs.container import get_job_queues
from sheetjobs.domain.jobs.job import JobResult, QueueType


# ============================================================================
# GET /job/{job_id}
# ============================================================================


def test_get_waiting_job(client, upload, sample_csv):
    """
    Test GET /job/{id} right after upload.

    Verifies:
    - Returns 200 OK with state waiting and progress 0
    - data echoes the upload, result is null
    - queueStats counts the queue
    - Cache-Control: no-cache
    """
    # Arrange
    upload(sample_csv, "products.csv")

    # Act
    response = client.get("/job/1", params={"worker": "csv"})

    # Assert
    assert response.status_code == status.HTTP_200_OK
    assert response.headers["cache-control"] == "no-cache"
    data = response.json()
    assert data["jobId"] == "1"
    assert data["state"] == "waiting"
    assert data["progress"] == 0
    assert data["queueType"] == "csv"
    assert data["data"]["originalName"] == "products.csv"
    assert data["data"]["fileType"] == "csv"
    assert data["result"] is None
    assert data["queueStats"]["waiting"] == 1
    assert data["timestamps"]["created"] is not None


def test_get_completed_job_has_result(client, upload, run_worker, sample_csv):
    """
    Test GET /job/{id} after processing.

    Verifies:
    - State completed, progress 100
    - Result counts, records and multi-value summary in camelCase
    """
    # Arrange
    upload(sample_csv, "products.csv")
    run_worker(QueueType.CSV)

    # Act
    response = client.get("/job/1", params={"worker": "csv"})

    # Assert
    data = response.json()
    assert data["state"] == "completed"
    assert data["progress"] == 100
    result = data["result"]
    assert (result["processed"], result["failed"], result["total"]) == (3, 0, 3)
    assert result["records"][0] == {
        "success": True,
        "data": {"ProductID": "1", "ProductName": "Lamp", "Tags": ["home", "light"]},
    }
    assert result["summary"]["multiValueFields"]["Tags"] == {
        "totalValues": 5,
        "uniqueValues": ["home", "light", "office"],
        "maxValuesInField": 2,
    }
    assert result["error"] is None
    assert data["queueStats"]["completed"] == 1


def test_get_failed_job_has_error(client, upload, run_worker):
    """Test a spreadsheet missing required columns shows FAILED with the error."""
    from io import BytesIO

    from openpyxl import Workbook

    workbook = Workbook()
    workbook.active.append(["ProductID", "ProductName"])
    workbook.active.append([1, "Lamp"])
    buffer = BytesIO()
    workbook.save(buffer)

    upload(buffer.getvalue(), "catalog.xlsx", "application/octet-stream")
    run_worker(QueueType.EXCEL)

    data = client.get("/job/1", params={"worker": "excel"}).json()

    assert data["state"] == "failed"
    assert data["result"]["total"] == 0
    assert data["result"]["error"]["message"] == "Missing required columns: Price, Quantity"
    assert data["result"]["error"]["type"] == "MissingRequiredColumnsError"


def test_get_job_without_worker_probes_queues(client, upload):
    """Test the excel queue is searched when the csv queue lacks the id."""
    upload(b"PK\x03\x04", "catalog.xlsx", "application/octet-stream")

    response = client.get("/job/1")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["queueType"] == "excel"


def test_get_job_not_found(client):
    """Test GET /job/{id} with an unknown id returns 404 JOB_NOT_FOUND."""
    response = client.get("/job/42", params={"worker": "csv"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    data = response.json()
    assert data["code"] == "JOB_NOT_FOUND"
    assert data["message"] == "Job not found in csv queue"


def test_get_job_invalid_worker(client):
    response = client.get("/job/1", params={"worker": "pdf"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_WORKER_TYPE"


def test_get_job_queue_unavailable(client):
    """Test a queue outage maps to 503."""
    with patch(
        "sheetjobs.application.queries.get_job.GetJobQueryHandler.handle",
        side_effect=QueueConnectionError("Redis down"),
    ):
        response = client.get("/job/1", params={"worker": "csv"})

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["code"] == "QUEUE_UNAVAILABLE"


# ============================================================================
# GET /jobs
# ============================================================================


def _complete_csv_jobs(count: int, make_payload) -> None:
    queue = get_job_queues()[QueueType.CSV]
    for _ in range(count):
        queue.add(make_payload())
        job = queue.claim_next()
        queue.complete(job.id, JobResult(processed=1, total=1))


def test_list_jobs_paginates(client, make_payload):
    """
    Test GET /jobs pagination.

    Verifies:
    - Page 2 of 25 with pageSize 10 holds jobs 11..20
    - pagination block in camelCase
    """
    # Arrange
    _complete_csv_jobs(25, make_payload)

    # Act
    response = client.get("/jobs", params={"worker": "csv", "status": "completed", "page": 2, "pageSize": 10})

    # Assert
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["queue"] == "csv"
    assert data["status"] == "completed"
    assert data["pagination"] == {"page": 2, "pageSize": 10, "totalJobs": 25, "totalPages": 3}
    assert [job["jobId"] for job in data["jobs"]] == [str(i) for i in range(11, 21)]
    assert data["queueStats"]["completed"] == 25


def test_list_jobs_defaults_to_active(client, upload, sample_csv):
    upload(sample_csv, "products.csv")

    data = client.get("/jobs", params={"worker": "csv"}).json()

    assert data["status"] == "active"
    assert data["jobs"] == []
    assert data["pagination"]["page"] == 1
    assert data["pagination"]["pageSize"] == 10
    assert data["queueStats"]["waiting"] == 1


def test_list_jobs_requires_worker(client):
    response = client.get("/jobs")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_WORKER_TYPE"


def test_list_jobs_invalid_status(client):
    response = client.get("/jobs", params={"worker": "csv", "status": "done"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "INVALID_STATUS"


def test_list_jobs_rejects_oversized_page(client):
    """Test pageSize above 100 fails request validation."""
    response = client.get("/jobs", params={"worker": "csv", "pageSize": 101})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
