"""
Celery Tasks

Contains:
    - celery_app: Celery application with the import/export queues
    - bulk_tasks: bulk_import / bulk_export task adapters
    - bootstrap: construction of the worker and submission service

Modules are imported explicitly (celery_app reads settings at import time).
"""
