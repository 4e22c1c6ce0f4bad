"""
Infrastructure Layer - External Dependencies

Implements the Application Layer protocols on top of Redis, polars,
openpyxl and the local file system. No business logic.

Modules:
    - persistence: RedisJobQueue, InMemoryJobQueue, Redis event publisher
    - file_storage: CSV / spreadsheet parsers, LocalUploadStorage

Usage:
    >>> from sheetjobs.infrastructure.persistence import InMemoryJobQueue
    >>> from sheetjobs.infrastructure.file_storage import CsvRecordParser
"""
