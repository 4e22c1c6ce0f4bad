"""
Domain Layer Exceptions

This module defines the exception hierarchy for the Domain Layer.
All domain-specific exceptions inherit from DomainException.

Responsibility:
    - Base exception class for domain errors
    - Type-safe error handling across layers
    - Clear separation from framework exceptions (Redis, Celery, FastAPI)

Architecture Notes:
    - Part of Shared Domain (used by jobs and records subdomains)
    - API Layer maps these to HTTP status codes (see api/main.py)
    - Worker maps ParseError to a FAILED job and RecordProcessingError
      to a per-record failure that does not stop the job
"""


class DomainException(Exception):
    """
    Base exception for all domain layer errors.

    All domain-specific exceptions inherit from this class to enable
    type-safe error handling in Application and API layers.

    Usage:
        - Catch this in Application Layer to handle all domain errors
        - API Layer converts to appropriate HTTP status codes
        - Infrastructure Layer raises its own exceptions (QueueConnectionError)

    Examples:
        >>> raise DomainException("Business rule violation")
    """

    def __init__(self, message: str) -> None:
        """
        Initialize domain exception with error message.

        Args:
            message: Human-readable error description
        """
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.__class__.__name__}: {self.message}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(message={self.message!r})"


class UnsupportedFileTypeError(DomainException):
    """
    Raised when an uploaded file name has no supported extension.

    Supported extensions are .csv (csv queue) and .xlsx/.xls (excel queue).
    Classification is by extension only, file contents are never inspected.

    Attributes:
        filename: Original file name that was rejected

    Examples:
        >>> raise UnsupportedFileTypeError("Unsupported file type: .pdf", filename="report.pdf")
    """

    def __init__(self, message: str, filename: str | None = None) -> None:
        self.filename = filename
        super().__init__(message)


class FileTooLargeError(DomainException):
    """
    Raised when an uploaded file exceeds the configured size limit.

    Attributes:
        file_size_bytes: Actual file size in bytes
        max_size_bytes: Maximum allowed size in bytes

    Examples:
        >>> raise FileTooLargeError(
        ...     "File too large",
        ...     file_size_bytes=6 * 1024 * 1024,
        ...     max_size_bytes=5 * 1024 * 1024,
        ... )
    """

    def __init__(
        self,
        message: str,
        file_size_bytes: int | None = None,
        max_size_bytes: int | None = None,
    ) -> None:
        self.file_size_bytes = file_size_bytes
        self.max_size_bytes = max_size_bytes

        # Build detailed message with human-readable sizes
        if file_size_bytes and max_size_bytes:
            file_mb = file_size_bytes / (1024 * 1024)
            max_mb = max_size_bytes / (1024 * 1024)
            super().__init__(f"{message} (File: {file_mb:.2f}MB, Max: {max_mb:.2f}MB)")
        else:
            super().__init__(message)


class ParseError(DomainException):
    """
    Raised when a file cannot be turned into records.

    A ParseError moves the whole job to FAILED with an error result and no
    per-record breakdown (processed=failed=total=0).

    This exception is raised when:
    - File is missing or unreadable
    - File is not valid CSV / spreadsheet content
    - Required header columns are missing (see MissingRequiredColumnsError)

    Attributes:
        file_path: Path to file that failed parsing (optional)
        original_error: Original exception from polars/openpyxl (optional)
    """

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.file_path = file_path
        self.original_error = original_error

        detailed_parts = [message]
        if file_path:
            detailed_parts.append(f"File: {file_path}")
        if original_error:
            detailed_parts.append(
                f"Original error: {type(original_error).__name__}: {original_error}"
            )

        super().__init__(" | ".join(detailed_parts))


class MissingRequiredColumnsError(ParseError):
    """
    Raised when the header row lacks one or more required columns.

    Raised before any data row is read.

    Attributes:
        missing: Required column names absent from the header, in required order

    Examples:
        >>> raise MissingRequiredColumnsError(["Price"])
        >>> # message: "Missing required columns: Price"
    """

    def __init__(self, missing: list[str], file_path: str | None = None) -> None:
        self.missing = list(missing)
        # file_path kept as attribute only, the message stays client-readable
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")
        self.file_path = file_path


class RecordProcessingError(DomainException):
    """
    Raised when a single record cannot be processed.

    Never aborts the job: the worker counts it as failed and moves on.

    Attributes:
        record_index: Zero-based position of the record in the file (optional)
        original_error: Underlying exception (optional)
    """

    def __init__(
        self,
        message: str,
        record_index: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.record_index = record_index
        self.original_error = original_error
        super().__init__(message)


class InvalidWorkerTypeError(DomainException):
    """
    Raised when a query names a queue type that does not exist.

    Examples:
        >>> raise InvalidWorkerTypeError("Invalid worker type. Use 'csv' or 'excel'")
    """

    def __init__(self, message: str, worker: str | None = None) -> None:
        self.worker = worker
        super().__init__(message)


class InvalidJobStatusError(DomainException):
    """Raised when a listing asks for a job state that does not exist."""

    def __init__(self, message: str, status: str | None = None) -> None:
        self.status = status
        super().__init__(message)


class InvalidJobStateTransitionError(DomainException):
    """
    Raised on a forbidden job state transition.

    Allowed transitions are waiting -> active, active -> completed|failed
    and delayed -> waiting. Terminal states are never left.

    Attributes:
        from_state: Current state value
        to_state: Requested state value
    """

    def __init__(self, from_state: str, to_state: str, job_id: str | None = None) -> None:
        self.from_state = from_state
        self.to_state = to_state
        self.job_id = job_id
        prefix = f"Job {job_id}: " if job_id else ""
        super().__init__(f"{prefix}cannot transition from '{from_state}' to '{to_state}'")
