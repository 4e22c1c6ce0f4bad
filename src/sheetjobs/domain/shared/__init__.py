"""Shared domain concepts used by the jobs and records subdomains."""

from .exceptions import (
    DomainException,
    FileTooLargeError,
    InvalidJobStateTransitionError,
    InvalidJobStatusError,
    InvalidWorkerTypeError,
    MissingRequiredColumnsError,
    ParseError,
    RecordProcessingError,
    UnsupportedFileTypeError,
)

__all__ = [
    "DomainException",
    "FileTooLargeError",
    "InvalidJobStateTransitionError",
    "InvalidJobStatusError",
    "InvalidWorkerTypeError",
    "MissingRequiredColumnsError",
    "ParseError",
    "RecordProcessingError",
    "UnsupportedFileTypeError",
]
