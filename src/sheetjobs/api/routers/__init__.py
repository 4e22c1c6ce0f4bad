"""
API Routers Package

Contains all FastAPI routers grouped by functionality.

Architecture Notes:
    - Part of API Layer (Presentation)
    - Routers are thin wrappers around Application Layer use cases and queries
    - All routers follow dependency injection pattern

Available Routers:
    - upload_router: POST /upload
    - jobs_router: GET /job/{job_id}, GET /jobs
    - metrics_router: GET /metrics
"""

from .jobs import router as jobs_router
from .metrics import router as metrics_router
from .upload import router as upload_router

__all__ = ["jobs_router", "metrics_router", "upload_router"]
