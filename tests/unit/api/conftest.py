"""
Common fixtures for API unit tests.

Provides shared test utilities:
- FastAPI TestClient (lifespan not entered, so no background workers run;
  tests drive processing explicitly with run_worker)
- Helpers to upload files and process queued jobs
"""

import io
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from sheetjobs.api.main import app
from sheetjobs.container import build_worker
from sheetjobs.domain.jobs.job import Job, QueueType


@pytest.fixture
def client():
    """
    FastAPI TestClient for testing endpoints.

    Returns TestClient configured with the FastAPI app.
    """
    return TestClient(app)


@pytest.fixture
def lenient_client():
    """TestClient that returns 500 responses instead of re-raising server errors."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def upload(client) -> Callable:
    """POST a file to /upload and return the response."""

    def _upload(content: bytes, filename: str = "products.csv", content_type: str = "text/csv"):
        return client.post("/upload", files={"file": (filename, io.BytesIO(content), content_type)})

    return _upload


@pytest.fixture
def run_worker() -> Callable[[QueueType], Optional[Job]]:
    """Process the next waiting job of a queue type with the configured worker."""

    def _run(queue_type: QueueType = QueueType.CSV) -> Optional[Job]:
        return build_worker(queue_type).process_next()

    return _run


@pytest.fixture
def sample_csv() -> bytes:
    return (
        b"ProductID,ProductName,Tags\n"
        b"1,Lamp,\"home, light\"\n"
        b"2,Chair,home|office\n"
        b"3,Desk,office\n"
    )
