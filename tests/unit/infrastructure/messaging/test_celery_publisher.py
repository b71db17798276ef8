"""Tests for CeleryJobPublisher routing."""

from unittest.mock import Mock

import pytest

from taskpilot_bulk.application.models import ExportJobMessage, ImportJobMessage
from taskpilot_bulk.infrastructure.messaging.celery_publisher import CeleryJobPublisher

JOB_ID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"


@pytest.fixture
def app():
    return Mock()


@pytest.fixture
def publisher(app):
    return CeleryJobPublisher(app, "bulk_import_queue", "bulk_export_queue")


def test_import_message_routed_to_import_queue(publisher, app):
    message = ImportJobMessage(job_id=JOB_ID, filename="a_1a2b3c4d.xlsx", type="project_excel", user_id=7)

    publisher.publish(message)

    app.send_task.assert_called_once_with(
        "bulk_import",
        args=[{"job_id": JOB_ID, "filename": "a_1a2b3c4d.xlsx", "type": "project_excel", "user_id": 7}],
        queue="bulk_import_queue",
        routing_key="bulk_import_queue",
        serializer="json",
        delivery_mode="persistent",
        task_id=JOB_ID,
    )


def test_export_message_routed_to_export_queue(publisher, app):
    message = ExportJobMessage(
        job_id=JOB_ID, filename="tasks_export.xlsx", type="task_excel", user_id=7, project_id=3
    )

    publisher.publish(message)

    args, kwargs = app.send_task.call_args
    assert args == ("bulk_export",)
    assert kwargs["queue"] == "bulk_export_queue"
    assert kwargs["args"][0]["project_id"] == 3


def test_broker_error_propagates(publisher, app):
    app.send_task.side_effect = ConnectionError("broker down")
    message = ImportJobMessage(job_id=JOB_ID, filename="a.xlsx", type="task_excel", user_id=7)

    with pytest.raises(ConnectionError):
        publisher.publish(message)


def test_unknown_message_type_rejected(publisher):
    with pytest.raises(TypeError):
        publisher.publish({"job_id": JOB_ID})
