"""
Tests for POST /upload endpoint.

Covers:
- Successful upload (csv and spreadsheet routing)
- File validation (missing file, type, size)
- Queue backend outage (503)
"""

from unittest.mock import patch

from fastapi import status

from sheetjobs.application.ports.job_queue import QueueConnectionError
from sheetjobs.container import get_job_queues
from sheetjobs.domain.jobs.job import JobState, QueueType


def test_upload_csv_success(upload, sample_csv):
    """
    Test successful CSV upload.

    Verifies:
    - Returns 200 OK
    - Response uses camelCase keys: message, jobId, originalName, fileType
    - Job waits in the csv queue
    """
    # Act
    response = upload(sample_csv, "products.csv")

    # Assert
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "message": "File queued for processing",
        "jobId": "1",
        "originalName": "products.csv",
        "fileType": "csv",
    }
    assert get_job_queues()[QueueType.CSV].get("1").state == JobState.WAITING


def test_upload_spreadsheet_routes_to_excel(upload):
    """Test .xlsx uploads get fileType excel."""
    response = upload(
        b"PK\x03\x04" + b"\x00" * 100,
        "catalog.xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["fileType"] == "excel"
    assert get_job_queues()[QueueType.EXCEL].get(response.json()["jobId"]) is not None


def test_upload_without_file(client):
    """Test a request without a file part returns 400 NO_FILE_UPLOADED."""
    response = client.post("/upload")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"code": "NO_FILE_UPLOADED", "message": "No file uploaded", "details": None}


def test_upload_unsupported_extension(upload):
    """
    Test upload with an unsupported file type.

    Verifies:
    - Returns 400 with UNSUPPORTED_FILE_TYPE
    - No job is created
    """
    response = upload(b"just text", "notes.txt", "text/plain")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    data = response.json()
    assert data["code"] == "UNSUPPORTED_FILE_TYPE"
    assert "Only CSV and Excel files are allowed" in data["message"]
    assert sum(get_job_queues()[QueueType.CSV].counts().values()) == 0


def test_upload_too_large(upload, monkeypatch):
    """Test files over MAX_UPLOAD_SIZE_MB are rejected with both sizes in details."""
    from sheetjobs.config import get_settings

    monkeypatch.setenv("MAX_UPLOAD_SIZE_MB", "0.001")
    get_settings.cache_clear()

    response = upload(b"x" * 2000, "big.csv")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    data = response.json()
    assert data["code"] == "FILE_TOO_LARGE"
    assert data["details"]["max_size_bytes"] == 1048
    assert data["details"]["file_size_bytes"] == 1049


def test_upload_queue_unavailable(upload, sample_csv):
    """Test an unreachable queue backend returns 503 QUEUE_UNAVAILABLE."""
    with patch(
        "sheetjobs.application.services.dispatcher.Dispatcher.enqueue",
        side_effect=QueueConnectionError("Redis down"),
    ):
        response = upload(sample_csv, "products.csv")

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["code"] == "QUEUE_UNAVAILABLE"
