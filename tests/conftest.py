"""
Pytest Configuration and Shared Fixtures

Fixtures shared by all unit tests.

Fixtures:
    - isolated_settings: fresh Settings / container caches per test, memory backend
    - make_payload: JobPayload factory
    - csv_queue / excel_queue / queues: InMemoryJobQueue instances
    - write_csv / write_xlsx: create input files in tmp_path

Architecture Notes:
    - No Redis needed: Redis-backed classes are tested with MagicMock,
      behavior of the worker and queries against InMemoryJobQueue
    - Spreadsheet fixtures are built with openpyxl at test time

Usage:
    def test_something(csv_queue, make_payload):
        job = csv_queue.add(make_payload())
"""

import logging
import os

# Must be set before sheetjobs modules read settings at import time
os.environ.setdefault("JOB_QUEUE_BACKEND", "memory")

from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest
from openpyxl import Workbook

from sheetjobs import container
from sheetjobs.config import get_settings
from sheetjobs.domain.jobs.job import JobPayload, QueueType
from sheetjobs.infrastructure.persistence.memory.job_queue import InMemoryJobQueue

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================


def _clear_caches() -> None:
    get_settings.cache_clear()
    container.get_job_queues.cache_clear()
    container.get_event_bus.cache_clear()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Every test starts with fresh settings: memory backend, uploads in tmp_path.

    Cleanup:
        Clears the cached Settings and container singletons after the test
    """
    monkeypatch.setenv("JOB_QUEUE_BACKEND", "memory")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("PUBLISH_JOB_EVENTS", "false")
    _clear_caches()
    yield
    _clear_caches()


# ============================================================================
# QUEUE FIXTURES
# ============================================================================


@pytest.fixture
def make_payload() -> Callable[..., JobPayload]:
    """Factory for JobPayload with sensible defaults."""

    def _make(
        file_path: str = "uploads/1-1.csv",
        original_name: str = "products.csv",
        file_type: QueueType = QueueType.CSV,
    ) -> JobPayload:
        return JobPayload(file_path=str(file_path), original_name=original_name, file_type=file_type)

    return _make


@pytest.fixture
def csv_queue() -> InMemoryJobQueue:
    return InMemoryJobQueue(QueueType.CSV, "csv-processing")


@pytest.fixture
def excel_queue() -> InMemoryJobQueue:
    return InMemoryJobQueue(QueueType.EXCEL, "excel-processing")


@pytest.fixture
def queues(csv_queue, excel_queue) -> Dict[QueueType, InMemoryJobQueue]:
    return {QueueType.CSV: csv_queue, QueueType.EXCEL: excel_queue}


# ============================================================================
# FILE FIXTURES
# ============================================================================


@pytest.fixture
def write_csv(tmp_path) -> Callable[[str, str], Path]:
    """Write CSV text to tmp_path/<name> and return the path."""

    def _write(content: str, name: str = "products.csv") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_xlsx(tmp_path) -> Callable[[List[List[Any]], str], Path]:
    """Write rows (first row = header) to the first worksheet of a new .xlsx."""

    def _write(rows: List[List[Any]], name: str = "products.xlsx") -> Path:
        workbook = Workbook()
        worksheet = workbook.active
        for row in rows:
            worksheet.append(row)
        path = tmp_path / name
        workbook.save(path)
        return path

    return _write
