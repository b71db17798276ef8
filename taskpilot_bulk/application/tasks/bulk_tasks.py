"""
Celery Tasks for Bulk Import/Export

One task per queue. Each delivery runs the worker pipeline once; the
outcome decides acknowledgement:
    - ACK: the task returns normally and the message is acked (late ack)
    - NACK: the task raises Reject(requeue=False), the broker drops the
      message without redelivery

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Thin adapter - the pipeline lives in BulkJobWorker
    - No Celery retries: a job gets a single attempt
"""

import logging

from celery import Task
from celery.exceptions import Reject
from celery.signals import worker_shutdown

from taskpilot_bulk.application.models import JobOutcome
from taskpilot_bulk.application.tasks.bootstrap import get_worker
from taskpilot_bulk.application.tasks.celery_app import (
    EXPORT_TASK_NAME,
    IMPORT_TASK_NAME,
    celery_app,
)
from taskpilot_bulk.infrastructure.persistence.redis.connection import close_connections

logger = logging.getLogger(__name__)


def _job_ref(payload) -> str:
    if isinstance(payload, dict):
        return str(payload.get("job_id", "<unknown>"))
    return "<unparsed>"


@celery_app.task(bind=True, name=IMPORT_TASK_NAME, acks_late=True, max_retries=0)
def bulk_import_task(self: Task, payload: dict) -> dict:
    """
    Import spreadsheet rows for one ImportJobMessage.

    Args:
        payload: ImportJobMessage JSON {job_id, filename, type, user_id}

    Returns:
        dict: {"job_id": str, "outcome": "ack"}

    Raises:
        Reject: When the pipeline failed or the payload was malformed
    """
    outcome = get_worker().handle_import(payload)
    if outcome is JobOutcome.NACK:
        logger.warning(f"Import job {_job_ref(payload)} rejected (task {self.request.id})")
        raise Reject(f"import job {_job_ref(payload)} failed", requeue=False)
    return {"job_id": _job_ref(payload), "outcome": outcome.value}


@celery_app.task(bind=True, name=EXPORT_TASK_NAME, acks_late=True, max_retries=0)
def bulk_export_task(self: Task, payload: dict) -> dict:
    """
    Export projects or tasks for one ExportJobMessage.

    Args:
        payload: ExportJobMessage JSON {job_id, filename, type, user_id, project_id?}

    Returns:
        dict: {"job_id": str, "outcome": "ack"}

    Raises:
        Reject: When the pipeline failed or the payload was malformed
    """
    outcome = get_worker().handle_export(payload)
    if outcome is JobOutcome.NACK:
        logger.warning(f"Export job {_job_ref(payload)} rejected (task {self.request.id})")
        raise Reject(f"export job {_job_ref(payload)} failed", requeue=False)
    return {"job_id": _job_ref(payload), "outcome": outcome.value}


@worker_shutdown.connect
def _close_redis_on_shutdown(**kwargs) -> None:
    close_connections()
