"""
Application Ports

Interfaces the Application Layer depends on; Infrastructure implements them.
"""

from .job_queue import JobNotFoundException, JobQueueProtocol, QueueConnectionError
from .record_parser import RecordParserProtocol
from .upload_storage import UploadStorageProtocol

__all__ = [
    "JobNotFoundException",
    "JobQueueProtocol",
    "QueueConnectionError",
    "RecordParserProtocol",
    "UploadStorageProtocol",
]
