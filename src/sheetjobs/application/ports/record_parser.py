"""
Record Parser Port

Converts a stored file into an ordered list of records.
Implemented by CsvRecordParser and ExcelRecordParser.
"""

from pathlib import Path
from typing import List, Protocol, Union

from sheetjobs.domain.records.record import Record


class RecordParserProtocol(Protocol):
    """
    Format-specific parser.

    parse() returns records in file order or raises ParseError
    (MissingRequiredColumnsError included). It never returns a partial list.
    """

    def parse(self, file_path: Union[str, Path]) -> List[Record]:
        ...
