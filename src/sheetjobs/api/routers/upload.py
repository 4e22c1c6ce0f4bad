"""
API Router for File Upload

Responsibility:
    HTTP interface for submitting a CSV or spreadsheet file for processing.
    Thin layer that delegates to FileUploadUseCase via dependency injection.

Architecture Notes:
    - Part of API Layer (Presentation)
    - Depends on Application Layer (FileUploadUseCase)
    - Domain errors (unsupported type, too large) are mapped to 400 by the
      global exception handler in api/main.py

Contains:
    - POST /upload - Store file and enqueue a job
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from sheetjobs.api.schemas.common import ErrorResponse
from sheetjobs.api.schemas.jobs import UploadResponse
from sheetjobs.application.services.file_upload_use_case import FileUploadUseCase
from sheetjobs.config import get_settings
from sheetjobs.container import get_dispatcher, get_upload_storage

# Configure logger
logger = logging.getLogger(__name__)


router = APIRouter(
    tags=["upload"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - Missing, unsupported or too large file"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Queue backend unreachable"},
    },
)


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================


def get_file_upload_use_case() -> FileUploadUseCase:
    """Build FileUploadUseCase with the process-wide dispatcher and storage."""
    return FileUploadUseCase(
        dispatcher=get_dispatcher(),
        storage=get_upload_storage(),
        max_upload_bytes=get_settings().max_upload_bytes,
    )


# ============================================================================
# ENDPOINTS
# ============================================================================


@router.post(
    "/upload",
    status_code=status.HTTP_200_OK,
    response_model=UploadResponse,
    summary="Upload a CSV or spreadsheet file for processing",
    description=(
        "Accepts .csv, .xlsx and .xls files (multipart field 'file'). "
        "The file is routed to the csv or excel queue by extension. "
        "Poll GET /job/{jobId}?worker=<fileType> for progress and results."
    ),
)
async def upload_file(
    file: UploadFile = File(None, description="CSV or spreadsheet file"),
    use_case: FileUploadUseCase = Depends(get_file_upload_use_case),
) -> UploadResponse:
    """
    Upload a file and queue it.

    Process Flow:
        1. Reject a request without a file (400)
        2. Read at most limit + 1 bytes (enough to detect an oversized file)
        3. Delegate to FileUploadUseCase
        4. Convert FileUploadResult to UploadResponse

    Examples:
        >>> # curl -F "file=@products.csv" http://localhost:3000/upload
        >>> {"message": "File queued for processing", "jobId": "1",
        ...  "originalName": "products.csv", "fileType": "csv"}
    """
    if file is None or not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "NO_FILE_UPLOADED",
                "message": "No file uploaded",
                "details": None,
            },
        )

    file_data = await file.read(use_case.max_upload_bytes + 1)
    result = await use_case.execute(file_data=file_data, filename=file.filename)

    return UploadResponse.from_result(result)
