"""
Multi-value field normalization and statistics.

Responsibility:
    - Turn a delimited text cell ("a, b|c") into an ordered token list
    - Accumulate per-field statistics over successfully processed records

Business Rules:
    - Delimiters are "," and "|", mixed freely
    - One pair of wrapping quotes around the whole value is stripped; the
      opening and closing quote may differ (" or ' on either side)
    - Tokens are trimmed, empty tokens dropped, order and duplicates kept
    - Statistics count only successful records; unique values keep
      first-seen order
"""

import re
from typing import Any, Dict, Iterable, List

from sheetjobs.domain.records.record import Record

_DELIMITER_PATTERN = re.compile(r"[,|]")
_QUOTES = ('"', "'")


def normalize_multi_value(value: Any) -> List[str]:
    """
    Normalize a raw multi-value cell into a list of tokens.

    Args:
        value: Raw cell value (None, text, number, or a sequence)

    Returns:
        Ordered list of non-empty trimmed tokens

    Examples:
        >>> normalize_multi_value('"red, blue|green"')
        ['red', 'blue', 'green']
        >>> normalize_multi_value("a,,b")
        ['a', 'b']
        >>> normalize_multi_value(None)
        []
        >>> normalize_multi_value(["x ", "", " y"])
        ['x', 'y']
    """
    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        tokens = (str(item).strip() for item in value if item is not None)
        return [token for token in tokens if token]

    text = str(value).strip()
    if not text:
        return []

    if len(text) >= 2 and text[0] in _QUOTES and text[-1] in _QUOTES:
        text = text[1:-1]

    tokens = (token.strip() for token in _DELIMITER_PATTERN.split(text))
    return [token for token in tokens if token]


def normalize_record(record: Record, fields: Iterable[str]) -> Record:
    """Apply normalize_multi_value in place to the configured fields present in record."""
    for field in fields:
        if field in record:
            record[field] = normalize_multi_value(record[field])
    return record


class MultiValueStats:
    """
    Running statistics for one multi-value field.

    Attributes:
        total_values: Sum of token counts over all observed records
        unique_values: Distinct tokens in first-seen order
        max_values_in_field: Largest token count seen in a single record
    """

    def __init__(self) -> None:
        self.total_values = 0
        self.max_values_in_field = 0
        # dict keeps insertion order, used as an ordered set
        self._unique: Dict[str, None] = {}

    def observe(self, tokens: List[str]) -> None:
        self.total_values += len(tokens)
        self.max_values_in_field = max(self.max_values_in_field, len(tokens))
        for token in tokens:
            self._unique.setdefault(token, None)

    @property
    def unique_values(self) -> List[str]:
        return list(self._unique)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_values": self.total_values,
            "unique_values": self.unique_values,
            "max_values_in_field": self.max_values_in_field,
        }


class MultiValueSummary:
    """
    Per-field MultiValueStats for a job run.

    Only fields that actually hold a list in a record are observed, so a
    field absent from the file does not show up in the summary.
    """

    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = list(fields)
        self._stats: Dict[str, MultiValueStats] = {}

    def observe(self, record: Record) -> None:
        for field in self.fields:
            value = record.get(field)
            if isinstance(value, list):
                self._stats.setdefault(field, MultiValueStats()).observe(value)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {field: stats.to_dict() for field, stats in self._stats.items()}
