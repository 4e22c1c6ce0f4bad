"""
File Upload Use Case

Orchestrates accepting an upload and turning it into a queued job.

Responsibility:
    - Classify the file by extension (reject unsupported types)
    - Enforce the upload size limit
    - Store the bytes and enqueue a job referencing them

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Depends on UploadStorageProtocol and Dispatcher
    - If enqueueing fails the stored file is removed again

Process Flow:
    1. classify(filename)              -> UnsupportedFileTypeError
    2. len(file_data) > max_upload     -> FileTooLargeError
    3. storage.save(file_data)         -> stored path
    4. dispatcher.enqueue(stored path) -> JobHandle
    5. Return FileUploadResult
"""

import logging

from pydantic import BaseModel

from sheetjobs.application.ports.upload_storage import UploadStorageProtocol
from sheetjobs.application.services.dispatcher import Dispatcher, classify
from sheetjobs.domain.jobs.job import QueueType
from sheetjobs.domain.shared.exceptions import FileTooLargeError

logger = logging.getLogger(__name__)


class FileUploadResult(BaseModel):
    """
    Result DTO returned by FileUploadUseCase.

    Attributes:
        message: Human-readable confirmation
        job_id: Id of the created job (unique within its queue)
        original_name: Uploaded file name
        file_type: Queue the job was routed to
    """

    message: str = "File queued for processing"
    job_id: str
    original_name: str
    file_type: QueueType

    class Config:
        json_schema_extra = {
            "example": {
                "message": "File queued for processing",
                "job_id": "1",
                "original_name": "products.csv",
                "file_type": "csv",
            }
        }


class FileUploadUseCase:
    """
    Accept an upload and queue it.

    Usage:
        use_case = FileUploadUseCase(dispatcher, storage, max_upload_bytes=5 * 1024 * 1024)
        result = await use_case.execute(file_data, "products.csv")
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        storage: UploadStorageProtocol,
        max_upload_bytes: int = 5 * 1024 * 1024,
    ) -> None:
        self.dispatcher = dispatcher
        self.storage = storage
        self.max_upload_bytes = max_upload_bytes

    async def execute(self, file_data: bytes, filename: str) -> FileUploadResult:
        """
        Store and enqueue an uploaded file.

        Raises:
            UnsupportedFileTypeError: Extension not supported
            FileTooLargeError: File exceeds max_upload_bytes
            QueueConnectionError: Queue backend unreachable (stored file removed)
        """
        queue_type = classify(filename)

        if len(file_data) > self.max_upload_bytes:
            raise FileTooLargeError(
                "File exceeds upload size limit",
                file_size_bytes=len(file_data),
                max_size_bytes=self.max_upload_bytes,
            )

        stored_path = self.storage.save(file_data, filename)
        try:
            handle = self.dispatcher.enqueue(stored_path, filename)
        except Exception:
            self.storage.delete(stored_path)
            raise

        logger.info(f"Upload '{filename}' queued as {queue_type.value} job {handle.id}")
        return FileUploadResult(
            job_id=handle.id,
            original_name=filename,
            file_type=handle.queue_type,
        )
