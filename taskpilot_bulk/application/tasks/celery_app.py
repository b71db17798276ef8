"""
Celery application for the bulk import/export worker.

Declares the broker connection and the two durable job queues. Consumer
settings give single-attempt, at-least-once delivery:
    - late acknowledgement (ack after the task body returns)
    - failed tasks are rejected, not requeued
    - prefetch of one message per worker process

Architecture Note:
- Part of Application Layer (orchestration)
- Uses WorkerSettings for configuration
- No business logic - pure infrastructure setup

Run a worker consuming both queues:
    celery -A taskpilot_bulk.application.tasks.celery_app worker \\
        -Q bulk_import_queue,bulk_export_queue
"""

from datetime import datetime

from celery import Celery
from kombu import Exchange, Queue
from redis.exceptions import RedisError

from taskpilot_bulk.infrastructure.persistence.redis.connection import (
    get_redis_client,
    health_check as redis_health_check,
)
from taskpilot_bulk.shared.config import get_settings

settings = get_settings()

IMPORT_TASK_NAME = "bulk_import"
EXPORT_TASK_NAME = "bulk_export"

bulk_exchange = Exchange("bulk_jobs", type="direct", durable=True)

celery_app = Celery(
    "taskpilot_bulk",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    task_queues=(
        Queue(
            settings.import_queue,
            exchange=bulk_exchange,
            routing_key=settings.import_queue,
            durable=True,
        ),
        Queue(
            settings.export_queue,
            exchange=bulk_exchange,
            routing_key=settings.export_queue,
            durable=True,
        ),
    ),
    task_routes={
        IMPORT_TASK_NAME: {"queue": settings.import_queue},
        EXPORT_TASK_NAME: {"queue": settings.export_queue},
    },
    task_default_queue=settings.import_queue,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_default_delivery_mode="persistent",
    task_acks_late=True,
    task_acks_on_failure_or_timeout=False,
    task_reject_on_worker_lost=False,
    worker_prefetch_multiplier=1,
    task_track_started=True,
    result_expires=3600,
    broker_connection_retry_on_startup=True,
)

# Register bulk_import / bulk_export
celery_app.autodiscover_tasks(["taskpilot_bulk.application.tasks"], related_name="bulk_tasks")


@celery_app.task(name="health_check")
def health_check() -> dict:
    """
    Health check task: proves the broker delivers and reports job store health.

    Returns:
        dict: Status information with timestamp
            - status (str): "ok" if the job store answers, "degraded" otherwise
            - redis (bool): Result of a PING over the job store pool
            - timestamp (str): ISO format timestamp
            - worker (str): Worker hostname that executed the task
    """
    try:
        get_redis_client(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            max_connections=settings.redis_max_connections,
            timeout=settings.redis_timeout_seconds,
            retry_attempts=1,
        )
        redis_ok = redis_health_check()
    except RedisError:
        redis_ok = False
    return {
        "status": "ok" if redis_ok else "degraded",
        "redis": redis_ok,
        "timestamp": datetime.now().isoformat(),
        "worker": (
            celery_app.current_task.request.hostname
            if celery_app.current_task
            else "unknown"
        ),
    }
