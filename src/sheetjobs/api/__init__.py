"""
API Layer - FastAPI Presentation Layer

Responsibility:
    HTTP interface for the application. Handles requests, responses,
    and maps application errors to status codes. No business logic.

Contains:
    - FastAPI routers (upload, jobs, metrics)
    - Response models (Pydantic, camelCase)
    - Dependency injection setup
    - Middleware configuration (CORS, logging)

Does NOT contain:
    - Business logic (belongs to Domain layer)
    - Job processing (belongs to Application layer)
    - Redis operations (belongs to Infrastructure layer)
"""
