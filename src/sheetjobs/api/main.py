"""
FastAPI Application Setup

Main entry point for the SheetJobs API application.

Responsibility:
    - FastAPI app initialization
    - Router registration (upload, jobs, metrics)
    - CORS middleware configuration
    - Global exception handlers
    - Request logging middleware
    - Health check endpoint
    - In-process workers when JOB_QUEUE_BACKEND=memory

Architecture Notes:
    - Part of API Layer (Presentation)
    - Entry point for HTTP server (uvicorn)
    - Centralizes cross-cutting concerns (logging, CORS, error handling)
    - No business logic - pure HTTP orchestration

Contains:
    - create_app() factory function
    - Global exception handlers
    - Request logging middleware
    - Health check endpoint: GET /health

Usage:
    uvicorn sheetjobs.api.main:app --port 3000
"""

import logging
import threading
import time
from contextlib import asynccontextmanager
from typing import Dict, List

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from sheetjobs import __version__
from sheetjobs.api.routers import jobs_router, metrics_router, upload_router
from sheetjobs.api.schemas.common import ErrorResponse
from sheetjobs.application.ports.job_queue import JobNotFoundException, QueueConnectionError
from sheetjobs.config import configure_logging, get_settings
from sheetjobs.container import build_worker, get_job_queues
from sheetjobs.domain.jobs.job import QueueType
from sheetjobs.domain.shared.exceptions import (
    DomainException,
    FileTooLargeError,
    InvalidJobStateTransitionError,
    InvalidJobStatusError,
    InvalidWorkerTypeError,
    UnsupportedFileTypeError,
)
from sheetjobs.infrastructure.persistence.redis.connection import close_connections, health_check

configure_logging()
logger = logging.getLogger(__name__)


# ============================================================================
# RESPONSE MODELS
# ============================================================================


class HealthCheckResponse(BaseModel):
    """
    Health check response model.

    Attributes:
        status: "ok" when the process answers
        version: API version
        timestamp: Unix timestamp of health check
        queues: "ready" for every served queue type
    """

    status: str = "ok"
    version: str = __version__
    timestamp: float
    queues: Dict[str, str]


# ============================================================================
# MIDDLEWARE
# ============================================================================


async def request_logging_middleware(request: Request, call_next):
    """
    Request logging middleware.

    Logging Format:
        INFO: "Incoming request: POST /upload"
        INFO: "Request completed: POST /upload - 200 - 0.123s"
    """
    logger.info(f"Incoming request: {request.method} {request.url.path}")

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} - "
        f"{response.status_code} - {duration:.3f}s"
    )

    return response


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


def _error_code(exc: DomainException) -> str:
    if isinstance(exc, UnsupportedFileTypeError):
        return "UNSUPPORTED_FILE_TYPE"
    if isinstance(exc, FileTooLargeError):
        return "FILE_TOO_LARGE"
    if isinstance(exc, InvalidWorkerTypeError):
        return "INVALID_WORKER_TYPE"
    if isinstance(exc, InvalidJobStatusError):
        return "INVALID_STATUS"
    return exc.__class__.__name__.replace("Error", "").upper()


async def domain_exception_handler(request: Request, exc: DomainException):
    """
    Global exception handler for domain layer exceptions.

    Mapping:
        - UnsupportedFileTypeError -> 400 Bad Request
        - FileTooLargeError -> 400 Bad Request
        - InvalidWorkerTypeError -> 400 Bad Request
        - InvalidJobStatusError -> 400 Bad Request
        - Other DomainException -> 400 Bad Request

    Examples:
        >>> # GET /jobs?worker=pdf
        >>> # Returns: 400 {"code": "INVALID_WORKER_TYPE",
        >>> #               "message": "Invalid worker type. Use 'csv' or 'excel'", ...}
    """
    details = {"exception_type": exc.__class__.__name__}
    if isinstance(exc, FileTooLargeError):
        details["max_size_bytes"] = exc.max_size_bytes
        details["file_size_bytes"] = exc.file_size_bytes

    error_response = ErrorResponse(
        code=_error_code(exc),
        message=exc.message,
        details=details,
    )

    logger.warning(
        f"Domain exception: {exc.__class__.__name__} - {str(exc)} - "
        f"Request: {request.method} {request.url.path}"
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response.model_dump(),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Keeps HTTPException bodies in the ErrorResponse shape.

    A dict detail with a "code" key is passed through as the body; any other
    detail becomes the message of a generic error.
    """
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        content = ErrorResponse(**exc.detail).model_dump()
    else:
        content = ErrorResponse(
            code=f"HTTP_{exc.status_code}",
            message=str(exc.detail),
        ).model_dump()

    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def invalid_transition_exception_handler(request: Request, exc: InvalidJobStateTransitionError):
    """A forbidden state transition is a bug in a worker, never a client error."""
    logger.error(f"Invalid job state transition: {exc} - Request: {request.method} {request.url.path}")
    error_response = ErrorResponse(
        code="INVALID_JOB_STATE_TRANSITION",
        message=exc.message,
        details={"job_id": exc.job_id, "from_state": exc.from_state, "to_state": exc.to_state},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(),
    )


async def job_not_found_exception_handler(request: Request, exc: JobNotFoundException):
    """Converts JobNotFoundException to 404 Not Found response."""
    error_response = ErrorResponse(
        code="JOB_NOT_FOUND",
        message=str(exc),
        details={"job_id": exc.job_id, "worker": exc.worker},
    )

    logger.warning(
        f"Job not found: {exc.job_id} - Request: {request.method} {request.url.path}"
    )

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_response.model_dump(),
    )


async def queue_connection_exception_handler(request: Request, exc: QueueConnectionError):
    """Queue backend unreachable -> 503 Service Unavailable."""
    error_response = ErrorResponse(
        code="QUEUE_UNAVAILABLE",
        message="Job queue backend is unavailable",
        details={"error": str(exc)},
    )

    logger.error(f"Queue unavailable: {exc} - Request: {request.method} {request.url.path}")

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_response.model_dump(),
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unexpected exceptions.

    Catches all unhandled exceptions and converts to 500 Internal Server Error.
    Logs full stack trace for debugging.
    """
    error_response = ErrorResponse(
        code="INTERNAL_SERVER_ERROR",
        message="An unexpected error occurred",
        details={"error": str(exc), "type": exc.__class__.__name__},
    )

    logger.error(
        f"Unexpected error: {exc.__class__.__name__} - {str(exc)} - "
        f"Request: {request.method} {request.url.path}",
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(),
    )


# ============================================================================
# LIFESPAN
# ============================================================================


def _start_in_process_workers(stop_event: threading.Event) -> List[threading.Thread]:
    """One polling thread per queue type, for the single-process memory backend."""
    settings = get_settings()
    threads = []
    for queue_type in get_job_queues():
        worker = build_worker(queue_type)
        thread = threading.Thread(
            target=worker.run_forever,
            kwargs={"poll_interval": settings.worker_poll_interval, "stop_event": stop_event},
            name=f"worker-{queue_type.value}",
            daemon=True,
        )
        thread.start()
        threads.append(thread)
    logger.info(f"Started {len(threads)} in-process workers")
    return threads


@asynccontextmanager
async def lifespan(app: FastAPI):
    stop_event = threading.Event()
    threads: List[threading.Thread] = []
    use_redis = get_settings().job_queue_backend != "memory"

    if use_redis:
        if not health_check():
            logger.warning("Redis is not reachable at startup; queue endpoints will answer 503")
    else:
        threads = _start_in_process_workers(stop_event)

    yield

    stop_event.set()
    for thread in threads:
        thread.join(timeout=5)
    if use_redis:
        close_connections()


# ============================================================================
# APP FACTORY
# ============================================================================


def create_app() -> FastAPI:
    """
    FastAPI application factory.

    Configuration:
        - Title: SheetJobs API
        - CORS: Allow all origins (development mode)
        - Routers: /upload, /job/{job_id}, /jobs, /metrics
        - Health: GET /health

    Returns:
        Configured FastAPI application instance

    Architecture Note:
        Factory pattern allows easy testing with dependency overrides
        and configuration injection.
    """
    app = FastAPI(
        title="SheetJobs API",
        version=__version__,
        description=(
            "Asynchronous CSV and spreadsheet processing. Upload a file, "
            "poll its job for progress and per-record results."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Production: restrict to specific origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(request_logging_middleware)

    # Resolved along the exception MRO, so subclass handlers take precedence
    app.add_exception_handler(InvalidJobStateTransitionError, invalid_transition_exception_handler)
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(JobNotFoundException, job_not_found_exception_handler)
    app.add_exception_handler(QueueConnectionError, queue_connection_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(upload_router)
    app.include_router(jobs_router)
    app.include_router(metrics_router)

    @app.get(
        "/health",
        response_model=HealthCheckResponse,
        status_code=status.HTTP_200_OK,
        summary="Health check endpoint",
        description="Liveness check, no dependency checks",
        tags=["health"],
    )
    def health() -> HealthCheckResponse:
        """
        Health check endpoint.

        Liveness only: answers while the process is alive and never
        touches the queue backend.
        """
        queues = {queue_type.value: "ready" for queue_type in QueueType}

        return HealthCheckResponse(
            status="ok",
            version=__version__,
            timestamp=time.time(),
            queues=queues,
        )

    logger.info("FastAPI application created successfully")
    logger.info("Registered routes: POST /upload, GET /job/{job_id}, GET /jobs, GET /metrics")

    return app


# ============================================================================
# APP INSTANCE (for uvicorn)
# ============================================================================

# Usage: uvicorn sheetjobs.api.main:app --port 3000
app = create_app()
