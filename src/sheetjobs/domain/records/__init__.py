"""Records subdomain: parsed row values, multi-value normalization, record processing."""

from .multi_value import (
    MultiValueStats,
    MultiValueSummary,
    normalize_multi_value,
    normalize_record,
)
from .record import FieldValue, Record, build_record, coerce_value, is_blank_row
from .record_processor import RecordProcessor

__all__ = [
    "FieldValue",
    "MultiValueStats",
    "MultiValueSummary",
    "Record",
    "RecordProcessor",
    "build_record",
    "coerce_value",
    "is_blank_row",
    "normalize_multi_value",
    "normalize_record",
]
