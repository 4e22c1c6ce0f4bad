"""
Tests for RecordProcessor.

Covers:
- Default transform copies the record
- Failures wrapped into RecordProcessingError with the record index
- Non-mapping input rejected
"""

import pytest

from sheetjobs.domain.records.record_processor import RecordProcessor
from sheetjobs.domain.shared.exceptions import RecordProcessingError


def test_process_returns_copy():
    """
    Test default processing.

    Verifies:
    - Output equals input
    - Output (and its lists) is a new object, the input is never mutated
    """
    # Arrange
    record = {"Name": "Lamp", "Tags": ["a", "b"]}
    processor = RecordProcessor()

    # Act
    result = processor.process(record, index=0)
    result["Tags"].append("c")

    # Assert
    assert result is not record
    assert record == {"Name": "Lamp", "Tags": ["a", "b"]}


def test_process_wraps_transform_errors():
    """Test a transform exception becomes RecordProcessingError with index and cause."""

    # Arrange
    def explode(record):
        raise KeyError("Price")

    processor = RecordProcessor(explode)

    # Act / Assert
    with pytest.raises(RecordProcessingError) as exc_info:
        processor.process({"Name": "x"}, index=4)

    assert exc_info.value.record_index == 4
    assert isinstance(exc_info.value.original_error, KeyError)
    assert "Failed to process record 4" in exc_info.value.message


def test_process_reraises_record_processing_error_unchanged():
    """Test a transform raising RecordProcessingError is not double-wrapped."""
    error = RecordProcessingError("bad price", record_index=1)

    def reject(record):
        raise error

    with pytest.raises(RecordProcessingError) as exc_info:
        RecordProcessor(reject).process({"Price": "x"}, index=1)

    assert exc_info.value is error


def test_process_rejects_non_mapping():
    """Test a non-mapping record fails as RecordProcessingError."""
    with pytest.raises(RecordProcessingError, match="must be a mapping"):
        RecordProcessor().process(["not", "a", "record"], index=2)
