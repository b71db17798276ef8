"""
Celery Job Publisher

JobPublisherProtocol implementation that sends job descriptors to the
import/export queues through the Celery app.

Business Rules:
    - Import messages go to IMPORT_QUEUE, export messages to EXPORT_QUEUE
    - Messages are JSON and persistent (survive a broker restart)
    - Broker errors propagate so the submission service can compensate
"""

import logging
from typing import Union

from celery import Celery

from taskpilot_bulk.application.models import ExportJobMessage, ImportJobMessage

logger = logging.getLogger(__name__)


class CeleryJobPublisher:
    """
    Examples:
        >>> publisher = CeleryJobPublisher(celery_app, "bulk_import_queue", "bulk_export_queue")
        >>> publisher.publish(message)
    """

    def __init__(
        self,
        app: Celery,
        import_queue: str,
        export_queue: str,
        import_task_name: str = "bulk_import",
        export_task_name: str = "bulk_export",
    ) -> None:
        self.app = app
        self.import_queue = import_queue
        self.export_queue = export_queue
        self.import_task_name = import_task_name
        self.export_task_name = export_task_name

    def publish(self, message: Union[ImportJobMessage, ExportJobMessage]) -> None:
        if isinstance(message, ExportJobMessage):
            task_name, queue = self.export_task_name, self.export_queue
        elif isinstance(message, ImportJobMessage):
            task_name, queue = self.import_task_name, self.import_queue
        else:
            raise TypeError(f"Unsupported job message: {type(message).__name__}")

        self.app.send_task(
            task_name,
            args=[message.to_payload()],
            queue=queue,
            routing_key=queue,
            serializer="json",
            delivery_mode="persistent",
            task_id=str(message.job_id),
        )
        logger.info(f"Published job {message.job_id} ({message.type}) to {queue}")
