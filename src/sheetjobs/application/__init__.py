"""
Application Layer - Use Cases and Orchestration

Responsibility:
    Coordinates the flow of data between API, Domain and Infrastructure.
    Runs the job pipeline: dispatch, worker state machine, queries.

Contains:
    - ports: JobQueueProtocol, RecordParserProtocol, UploadStorageProtocol
    - services: Dispatcher, FileUploadUseCase, JobWorker, ProgressTracker
    - queries: GetJob, ListJobs, GetMetrics (CQRS read side)
    - events: JobEventBus and lifecycle events
    - tasks: Celery app and processing task

Does NOT contain:
    - Domain business rules (belongs to Domain layer)
    - HTTP handling (belongs to API layer)
    - Redis / file format details (belongs to Infrastructure layer)
"""
