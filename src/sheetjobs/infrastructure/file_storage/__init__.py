"""
File Storage Infrastructure Module

File system operations and record parsing with polars / openpyxl.

Exports:
    - CsvRecordParser: Parse delimited text files with polars
    - ExcelRecordParser: Parse spreadsheets (openpyxl, polars calamine for .xls)
    - LocalUploadStorage: Store uploads until their job releases them
"""

from .csv_reader import CsvRecordParser
from .excel_reader import ExcelRecordParser, flatten_cell
from .upload_storage import LocalUploadStorage

__all__ = [
    "CsvRecordParser",
    "ExcelRecordParser",
    "LocalUploadStorage",
    "flatten_cell",
]
