"""
Excel Record Parser

Parses spreadsheet uploads (.xlsx, .xls) into records.

Responsibility:
    - Read the first worksheet; row 1 is the header
    - Validate the header against the required columns before any data row
    - Map data rows positionally onto the header
    - Flatten rich text cells to plain text
    - Skip fully empty rows
    - Multi-value normalization of configured fields (Tags, Categories)

Architecture Notes:
    - Infrastructure Layer, implements RecordParserProtocol
    - .xlsx/.xlsm: openpyxl in read-only mode (streams rows, keeps cell
      types: numbers stay numbers, formulas yield cached values)
    - .xls: polars read_excel (calamine engine), openpyxl cannot read BIFF

Business Rules:
    - Required columns default: ProductID, ProductName, Price, Quantity
    - Missing columns -> MissingRequiredColumnsError listing all of them
    - Columns with an empty header cell are ignored
"""

import logging
from pathlib import Path
from typing import Any, Generator, Iterable, List, Optional, Sequence, Union
from zipfile import BadZipFile

import polars as pl
from openpyxl import load_workbook
from openpyxl.cell.rich_text import CellRichText
from openpyxl.utils.exceptions import InvalidFileException

from sheetjobs.domain.records.multi_value import normalize_record
from sheetjobs.domain.records.record import Record, build_record, is_blank_row
from sheetjobs.domain.shared.exceptions import MissingRequiredColumnsError, ParseError

# Configure logger for this module
logger = logging.getLogger(__name__)

RowStream = Generator[Sequence[Any], None, None]

DEFAULT_REQUIRED_COLUMNS = ["ProductID", "ProductName", "Price", "Quantity"]
OPENPYXL_EXTENSIONS = {".xlsx", ".xlsm"}


def flatten_cell(value: Any) -> Any:
    """
    Flatten rich text to plain text, leave other values untouched.

    Examples:
        >>> flatten_cell(CellRichText(["Bold", " and plain"]))
        'Bold and plain'
        >>> flatten_cell(10.5)
        10.5
    """
    if isinstance(value, CellRichText):
        return "".join(
            block if isinstance(block, str) else block.text for block in value
        )
    return value


class ExcelRecordParser:
    """
    Parser for .xlsx / .xls uploads.

    Examples:
        >>> parser = ExcelRecordParser(multi_value_fields=["Tags", "Categories"])
        >>> records = parser.parse("products.xlsx")
        >>> records[0]["Price"]
        10.5
    """

    def __init__(
        self,
        required_columns: Optional[Iterable[str]] = None,
        multi_value_fields: Optional[Iterable[str]] = None,
    ) -> None:
        self.required_columns = (
            list(required_columns) if required_columns is not None else list(DEFAULT_REQUIRED_COLUMNS)
        )
        self.multi_value_fields = list(multi_value_fields or [])

    # ------------------------------------------------------------------
    # Row sources
    # ------------------------------------------------------------------

    def _iter_openpyxl_rows(self, file_path: Path) -> RowStream:
        try:
            workbook = load_workbook(file_path, read_only=True, data_only=True, rich_text=True)
        except (OSError, BadZipFile, InvalidFileException, KeyError, ValueError) as e:
            raise ParseError("Cannot open spreadsheet", file_path=str(file_path), original_error=e) from e

        try:
            worksheet = workbook.worksheets[0]
            for row in worksheet.iter_rows(values_only=True):
                yield [flatten_cell(value) for value in row]
        finally:
            workbook.close()

    def _iter_polars_rows(self, file_path: Path) -> RowStream:
        try:
            df = pl.read_excel(source=file_path, sheet_id=1, engine="calamine")
        except Exception as e:
            raise ParseError(
                "Cannot parse Excel file (calamine engine)",
                file_path=str(file_path),
                original_error=e,
            ) from e
        # polars consumes row 1 as column names; hand it back as the header row
        yield list(df.columns)
        for row in df.iter_rows():
            yield list(row)

    def _iter_rows(self, file_path: Path) -> RowStream:
        if file_path.suffix.lower() in OPENPYXL_EXTENSIONS:
            return self._iter_openpyxl_rows(file_path)
        return self._iter_polars_rows(file_path)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _validate_columns(self, headers: List[str], file_path: Path) -> None:
        missing = [column for column in self.required_columns if column not in headers]
        if missing:
            raise MissingRequiredColumnsError(missing, file_path=str(file_path))

    def parse(self, file_path: Union[str, Path]) -> List[Record]:
        """
        Parse the first worksheet into records in row order.

        Raises:
            ParseError: File missing, unreadable or not a spreadsheet
            MissingRequiredColumnsError: Header row lacks a required column
        """
        path = Path(file_path)
        if not path.exists():
            raise ParseError("File not found", file_path=str(path))

        rows = self._iter_rows(path)
        records: List[Record] = []
        try:
            header_row = next(rows, None)
            if header_row is None:
                headers: List[str] = []
            else:
                headers = ["" if value is None else str(value).strip() for value in header_row]

            # Header checked before any data row is read
            self._validate_columns(headers, path)

            for row in rows:
                if is_blank_row(list(row)):
                    continue
                record = build_record(headers, list(row))
                record.pop("", None)
                records.append(normalize_record(record, self.multi_value_fields))
        finally:
            rows.close()

        logger.info(f"Parsed {len(records)} records from {path.name} ({len(headers)} columns)")
        return records
