"""In-process job queue (single process, tests and local runs)."""

from .job_queue import InMemoryJobQueue

__all__ = ["InMemoryJobQueue"]
