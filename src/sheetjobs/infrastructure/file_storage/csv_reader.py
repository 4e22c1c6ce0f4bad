"""
CSV Record Parser

Parses delimited text files into records using polars.

Responsibility:
    - First line is the header, data lines map positionally onto it
    - Every value read as text (no type inference), trimmed
    - Empty lines skipped, ragged lines tolerated
    - Optional required-column check (CSV_REQUIRED_COLUMNS)
    - Multi-value normalization of configured fields (Tags, Categories)

Architecture Notes:
    - Infrastructure Layer, implements RecordParserProtocol
    - polars handles quoting: delimiters inside quoted fields are preserved
    - Missing trailing cells become "", extra cells are dropped
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

import polars as pl

from sheetjobs.domain.records.multi_value import normalize_record
from sheetjobs.domain.records.record import Record, build_record, is_blank_row
from sheetjobs.domain.shared.exceptions import MissingRequiredColumnsError, ParseError

logger = logging.getLogger(__name__)


class CsvRecordParser:
    """
    Parser for .csv uploads.

    Examples:
        >>> parser = CsvRecordParser(multi_value_fields=["Tags"])
        >>> parser.parse("products.csv")
        [{'Name': 'Lamp', 'Tags': ['home', 'light']}]
    """

    def __init__(
        self,
        required_columns: Optional[Iterable[str]] = None,
        multi_value_fields: Optional[Iterable[str]] = None,
    ) -> None:
        self.required_columns = list(required_columns or [])
        self.multi_value_fields = list(multi_value_fields or [])

    def _load_dataframe(self, file_path: Path) -> pl.DataFrame:
        if not file_path.exists():
            raise ParseError("File not found", file_path=str(file_path))

        try:
            return pl.read_csv(
                file_path,
                has_header=True,
                infer_schema=False,  # all columns as text
                truncate_ragged_lines=True,
                missing_utf8_is_empty_string=True,
                raise_if_empty=False,
                encoding="utf8-lossy",
            )
        except (OSError, pl.exceptions.PolarsError) as e:
            raise ParseError("Cannot parse CSV file", file_path=str(file_path), original_error=e) from e

    def _validate_columns(self, headers: List[str], file_path: Path) -> None:
        missing = [column for column in self.required_columns if column not in headers]
        if missing:
            raise MissingRequiredColumnsError(missing, file_path=str(file_path))

    def parse(self, file_path: Union[str, Path]) -> List[Record]:
        """
        Parse a CSV file into records in file order.

        Raises:
            ParseError: File missing or not parseable
            MissingRequiredColumnsError: Header lacks a required column
        """
        path = Path(file_path)
        df = self._load_dataframe(path)
        headers = [column.strip() for column in df.columns]
        self._validate_columns(headers, path)

        records: List[Record] = []
        for row in df.iter_rows():
            if is_blank_row(list(row)):
                continue
            record = build_record(headers, list(row))
            records.append(normalize_record(record, self.multi_value_fields))

        logger.info(f"Parsed {len(records)} records from {path.name} ({len(headers)} columns)")
        return records
