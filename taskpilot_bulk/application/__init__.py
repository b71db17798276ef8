"""
Application Layer

Responsibility:
    Orchestrates bulk jobs: submission, queue consumption, status queries.

Contains:
    - models: queue message contract and JobOutcome
    - ports: Protocol interfaces implemented by Infrastructure
    - services: JobSubmissionService, BulkJobWorker, row handlers
    - queries: GetJobStatusQueryHandler
    - tasks: Celery app and the import/export tasks

Does NOT contain:
    - Business rules of the Job state machine (Domain Layer)
    - Redis/S3/openpyxl code (Infrastructure Layer)
"""
