"""
Application Settings

Reads configuration from environment variables (optionally from a .env file
via python-dotenv) once per process.

Responsibility:
    - Single source of truth for REDIS_URL, upload limits, queue backend
    - Per-format multi-value field lists and optional CSV required columns
    - Logging setup shared by the API and worker entry points

Examples:
    >>> settings = get_settings()
    >>> settings.redis_url
    'redis://localhost:6379/0'
"""

import logging
import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def _split_list(raw: Optional[str], default: List[str]) -> List[str]:
    if raw is None:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _as_bool(raw: Optional[str], default: bool = False) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """
    Process-wide configuration.

    Attributes:
        redis_url: Connection string for the job queues and the Celery broker
        celery_result_backend: Celery result backend URL
        job_queue_backend: "redis" (shared, durable) or "memory" (single process)
        queue_key_prefix: Namespace of all Redis keys written by the queues
        api_port: Base port of the HTTP API
        upload_dir: Directory where uploads are stored until processed
        max_upload_bytes: Upload size limit
        csv_required_columns: Header columns a CSV must contain (empty = no check)
        excel_required_columns: Header columns a spreadsheet must contain
        csv_multi_value_fields: Fields normalized into token lists for CSV
        excel_multi_value_fields: Fields normalized into token lists for spreadsheets
        keep_failed_uploads: Keep the stored file of a failed job for inspection
        worker_poll_interval: Seconds a standalone worker sleeps on an empty queue
        publish_job_events: Mirror job events to Redis pub/sub
        log_level: Root logging level
        redis_retry_attempts: Connection attempts before giving up
    """

    redis_url: str = DEFAULT_REDIS_URL
    celery_result_backend: str = DEFAULT_REDIS_URL
    job_queue_backend: str = "redis"
    queue_key_prefix: str = "sheetjobs"
    api_port: int = 3000
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024
    csv_required_columns: List[str] = Field(default_factory=list)
    excel_required_columns: List[str] = Field(
        default_factory=lambda: ["ProductID", "ProductName", "Price", "Quantity"]
    )
    csv_multi_value_fields: List[str] = Field(default_factory=lambda: ["Tags", "Categories"])
    excel_multi_value_fields: List[str] = Field(default_factory=lambda: ["Tags", "Categories"])
    keep_failed_uploads: bool = False
    worker_poll_interval: float = 1.0
    publish_job_events: bool = False
    log_level: str = "INFO"
    redis_retry_attempts: int = 3

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (after loading .env)."""
        load_dotenv()

        redis_url = os.getenv("REDIS_URL", DEFAULT_REDIS_URL)
        max_upload_mb = float(os.getenv("MAX_UPLOAD_SIZE_MB", "5"))

        return cls(
            redis_url=redis_url,
            celery_result_backend=os.getenv("CELERY_RESULT_BACKEND", redis_url),
            job_queue_backend=os.getenv("JOB_QUEUE_BACKEND", "redis").lower(),
            queue_key_prefix=os.getenv("QUEUE_KEY_PREFIX", "sheetjobs"),
            api_port=int(os.getenv("API_PORT", "3000")),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            max_upload_bytes=int(max_upload_mb * 1024 * 1024),
            csv_required_columns=_split_list(os.getenv("CSV_REQUIRED_COLUMNS"), []),
            excel_required_columns=_split_list(
                os.getenv("EXCEL_REQUIRED_COLUMNS"), ["ProductID", "ProductName", "Price", "Quantity"]
            ),
            csv_multi_value_fields=_split_list(
                os.getenv("CSV_MULTI_VALUE_FIELDS"), ["Tags", "Categories"]
            ),
            excel_multi_value_fields=_split_list(
                os.getenv("EXCEL_MULTI_VALUE_FIELDS"), ["Tags", "Categories"]
            ),
            keep_failed_uploads=_as_bool(os.getenv("KEEP_FAILED_UPLOADS")),
            worker_poll_interval=float(os.getenv("WORKER_POLL_INTERVAL", "1.0")),
            publish_job_events=_as_bool(os.getenv("PUBLISH_JOB_EVENTS")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            redis_retry_attempts=int(os.getenv("REDIS_RETRY_ATTEMPTS", "3")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide Settings, read once."""
    return Settings.from_env()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging the same way for API, Celery and standalone workers."""
    logging.basicConfig(
        level=getattr(logging, (level or get_settings().log_level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
