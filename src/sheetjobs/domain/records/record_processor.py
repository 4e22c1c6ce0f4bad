"""
Record Processor - per-record transformation with isolated failure.

Responsibility:
    - Transform one parsed record into its processed form
    - Convert any failure into RecordProcessingError so the worker can count
      it and continue with the next record

Architecture Notes:
    - Domain service, no I/O and no job-global state
    - Safe to call in any order; the worker's counters are commutative
    - The default transform returns a copy of the record; callers may
      inject their own transform (e.g. field validation, enrichment)
"""

import logging
from typing import Callable, Mapping, Optional

from sheetjobs.domain.shared.exceptions import RecordProcessingError
from sheetjobs.domain.records.record import Record

logger = logging.getLogger(__name__)

RecordTransform = Callable[[Record], Record]


def _copy_record(record: Record) -> Record:
    return {
        key: list(value) if isinstance(value, list) else value
        for key, value in record.items()
    }


class RecordProcessor:
    """
    Process single records.

    Examples:
        >>> processor = RecordProcessor()
        >>> processor.process({"A": "1"})
        {'A': '1'}

        >>> def reject_empty_name(record):
        ...     if not record.get("ProductName"):
        ...         raise ValueError("ProductName is empty")
        ...     return record
        >>> RecordProcessor(reject_empty_name).process({"ProductName": ""}, index=3)
        Traceback (most recent call last):
        RecordProcessingError: ...
    """

    def __init__(self, transform: Optional[RecordTransform] = None) -> None:
        self.transform = transform or _copy_record

    def process(self, record: Record, index: Optional[int] = None) -> Record:
        """
        Process one record.

        Args:
            record: Parsed record
            index: Position of the record in the file (for error reporting)

        Returns:
            Processed record

        Raises:
            RecordProcessingError: For any failure while processing
        """
        if not isinstance(record, Mapping):
            raise RecordProcessingError(
                f"Record must be a mapping, got {type(record).__name__}",
                record_index=index,
            )

        try:
            return self.transform(_copy_record(record))
        except RecordProcessingError:
            raise
        except Exception as e:
            raise RecordProcessingError(
                f"Failed to process record {index}: {e}",
                record_index=index,
                original_error=e,
            ) from e
