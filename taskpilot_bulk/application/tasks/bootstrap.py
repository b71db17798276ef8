"""
Process-wide wiring of the worker and the submission service.

Builds concrete adapters from WorkerSettings once per process:
    - storage backend from STORAGE_TYPE
    - RedisJobRepository on the pooled Redis client
    - data-access service from the DATA_SERVICE_FACTORY dotted path
    - CeleryJobPublisher on the shared Celery app
"""

import logging
import threading
from typing import Optional

from celery.utils.imports import symbol_by_name

from taskpilot_bulk.application.ports.data_access import TrackerDataServiceProtocol
from taskpilot_bulk.application.queries.get_job_status import GetJobStatusQueryHandler
from taskpilot_bulk.application.services.job_submission_service import JobSubmissionService
from taskpilot_bulk.application.services.job_worker import BulkJobWorker
from taskpilot_bulk.domain.shared.exceptions import ConfigurationError
from taskpilot_bulk.infrastructure.file_storage.storage_factory import create_storage
from taskpilot_bulk.infrastructure.persistence.redis.connection import get_redis_client
from taskpilot_bulk.infrastructure.persistence.redis.job_repository import RedisJobRepository
from taskpilot_bulk.shared.config import WorkerSettings, get_settings

logger = logging.getLogger(__name__)

_worker: Optional[BulkJobWorker] = None
_worker_lock = threading.Lock()


def load_data_service(settings: WorkerSettings) -> TrackerDataServiceProtocol:
    """
    Instantiate the data-access service named by DATA_SERVICE_FACTORY.

    The setting is a dotted path ("pkg.module:factory" or "pkg.module.factory")
    to a zero-argument callable.

    Raises:
        ConfigurationError: If the setting is missing or cannot be imported
    """
    if not settings.data_service_factory:
        raise ConfigurationError(
            "DATA_SERVICE_FACTORY is not set; the worker needs a data-access service"
        )
    try:
        factory = symbol_by_name(settings.data_service_factory)
    except (ImportError, AttributeError, ValueError) as e:
        raise ConfigurationError(
            f"Cannot import DATA_SERVICE_FACTORY {settings.data_service_factory!r}: {e}"
        ) from e

    service = factory()
    logger.info(f"Data service loaded from {settings.data_service_factory}")
    return service


def create_job_repository(settings: WorkerSettings) -> RedisJobRepository:
    client = get_redis_client(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        max_connections=settings.redis_max_connections,
        timeout=settings.redis_timeout_seconds,
        retry_attempts=settings.redis_retry_attempts,
    )
    return RedisJobRepository(client, ttl_seconds=settings.job_ttl_seconds)


def build_worker(settings: Optional[WorkerSettings] = None) -> BulkJobWorker:
    settings = settings or get_settings()
    return BulkJobWorker(
        storage=create_storage(settings),
        jobs=create_job_repository(settings),
        data_service=load_data_service(settings),
        process_dir=settings.process_dir,
        step_timeout=settings.step_timeout_seconds,
        import_timeout=settings.import_timeout_seconds,
    )


def get_worker() -> BulkJobWorker:
    """Process-wide worker, built on first use."""
    global _worker

    if _worker is None:
        with _worker_lock:
            if _worker is None:
                _worker = build_worker()
    return _worker


def reset_worker() -> None:
    global _worker

    with _worker_lock:
        _worker = None


def build_submission_service(settings: Optional[WorkerSettings] = None) -> JobSubmissionService:
    """Submission service for the tracker's request handlers."""
    from taskpilot_bulk.application.tasks.celery_app import celery_app
    from taskpilot_bulk.infrastructure.messaging.celery_publisher import CeleryJobPublisher

    settings = settings or get_settings()
    publisher = CeleryJobPublisher(celery_app, settings.import_queue, settings.export_queue)
    return JobSubmissionService(
        storage=create_storage(settings),
        jobs=create_job_repository(settings),
        publisher=publisher,
    )


def build_status_handler(settings: Optional[WorkerSettings] = None) -> GetJobStatusQueryHandler:
    return GetJobStatusQueryHandler(create_job_repository(settings or get_settings()))
