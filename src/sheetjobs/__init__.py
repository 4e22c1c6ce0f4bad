"""
SheetJobs - asynchronous processing of uploaded CSV and spreadsheet files.

Layers:
    - domain: records, jobs, exceptions (no I/O)
    - application: dispatcher, worker state machine, queries, Celery tasks
    - infrastructure: Redis / in-memory job queues, file parsers, upload storage
    - api: FastAPI presentation layer
"""

__version__ = "0.1.0"
