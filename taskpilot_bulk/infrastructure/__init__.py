"""
Infrastructure Layer

Responsibility:
    Implementations of Application Layer ports backed by external systems.

Contains:
    - file_storage: local/S3 blob storage, Excel importer and exporter
    - messaging: Celery job publisher
    - persistence: Redis and in-memory job repositories

Does NOT contain:
    - Orchestration (Application Layer)
    - Business rules (Domain Layer)
"""
