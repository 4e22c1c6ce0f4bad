"""
Application Services

Contains:
    - Dispatcher / classify: route uploads to type-specific queues
    - FileUploadUseCase: store an upload and enqueue it
    - JobWorker: job state machine for one queue
    - ProgressTracker: per-record progress emission
"""

from .dispatcher import Dispatcher, JobHandle, classify
from .file_upload_use_case import FileUploadResult, FileUploadUseCase
from .job_worker import JobWorker, log_with_memory
from .progress_tracker import ProgressTracker

__all__ = [
    "Dispatcher",
    "FileUploadResult",
    "FileUploadUseCase",
    "JobHandle",
    "JobWorker",
    "ProgressTracker",
    "classify",
    "log_with_memory",
]
