"""
Record value types.

A Record is one parsed row: a mapping from header name to a FieldValue.
FieldValue is a closed union of text, number and an ordered list of text
tokens (multi-value fields after normalization).
"""

from datetime import date, datetime, time
from typing import Any, Dict, List, Union

FieldValue = Union[str, int, float, List[str]]
Record = Dict[str, FieldValue]


def coerce_value(raw: Any) -> FieldValue:
    """
    Coerce a raw cell value into a FieldValue.

    Rules:
        - None -> ""
        - bool -> "true" / "false"
        - int / float -> unchanged (NaN becomes "")
        - date / datetime / time -> ISO 8601 text
        - list / tuple -> list of trimmed, non-empty strings
        - anything else (rich text, formula results) -> str(raw)

    Examples:
        >>> coerce_value(None)
        ''
        >>> coerce_value(10.5)
        10.5
        >>> coerce_value(True)
        'true'
    """
    if raw is None:
        return ""
    # bool before int: bool is an int subclass
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return "" if raw != raw else raw
    if isinstance(raw, (datetime, date, time)):
        return raw.isoformat()
    if isinstance(raw, (list, tuple)):
        return [str(item).strip() for item in raw if item is not None and str(item).strip()]
    return str(raw)


def build_record(headers: List[str], values: List[Any]) -> Record:
    """
    Map a row of values positionally onto header names.

    Missing trailing cells become "", extra cells beyond the header are
    dropped, text values are trimmed.
    """
    record: Record = {}
    for index, header in enumerate(headers):
        raw = values[index] if index < len(values) else None
        value = coerce_value(raw)
        if isinstance(value, str):
            value = value.strip()
        record[header] = value
    return record


def is_blank_row(values: List[Any]) -> bool:
    """True when every cell of a row is None or whitespace-only text."""
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return False
    return True
