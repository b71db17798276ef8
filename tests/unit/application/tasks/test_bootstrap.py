"""Tests for worker and submission service wiring."""

from unittest.mock import MagicMock, patch

import pytest

from taskpilot_bulk.application.services.job_worker import BulkJobWorker
from taskpilot_bulk.application.tasks import bootstrap
from taskpilot_bulk.domain.shared.exceptions import ConfigurationError
from taskpilot_bulk.infrastructure.file_storage.local_storage import LocalStorage
from taskpilot_bulk.infrastructure.persistence.redis.job_repository import RedisJobRepository
from taskpilot_bulk.shared.config import WorkerSettings
from tests.fakes import FakeDataService


@pytest.fixture
def settings(tmp_path):
    return WorkerSettings(
        upload_dir=str(tmp_path / "uploads"),
        process_dir=str(tmp_path / "process"),
        data_service_factory="tests.fakes:create_fake_data_service",
        step_timeout_seconds=12,
        job_ttl_seconds=600,
    )


@pytest.fixture(autouse=True)
def redis_client():
    bootstrap.reset_worker()
    with patch.object(bootstrap, "get_redis_client", return_value=MagicMock()) as get_client:
        yield get_client
    bootstrap.reset_worker()


def test_load_data_service_from_dotted_path(settings):
    assert isinstance(bootstrap.load_data_service(settings), FakeDataService)


@pytest.mark.parametrize(
    "factory",
    [None, "tests.no_such_module:build", "tests.fakes:no_such_factory"],
)
def test_load_data_service_errors(settings, factory):
    with pytest.raises(ConfigurationError, match="DATA_SERVICE_FACTORY"):
        bootstrap.load_data_service(settings.model_copy(update={"data_service_factory": factory}))


def test_build_worker_wires_adapters(settings, redis_client):
    worker = bootstrap.build_worker(settings)

    assert isinstance(worker, BulkJobWorker)
    assert isinstance(worker.storage, LocalStorage)
    assert isinstance(worker.jobs, RedisJobRepository)
    assert worker.jobs.ttl_seconds == 600
    assert worker.step_timeout == 12
    redis_client.assert_called_once_with(
        host="localhost", port=6379, db=0, max_connections=10, timeout=5.0, retry_attempts=3
    )


def test_get_worker_is_singleton(settings):
    with patch.object(bootstrap, "get_settings", return_value=settings):
        assert bootstrap.get_worker() is bootstrap.get_worker()


def test_build_submission_service_uses_celery_publisher(settings):
    service = bootstrap.build_submission_service(settings)

    assert service.publisher.import_queue == "bulk_import_queue"
    assert service.publisher.export_queue == "bulk_export_queue"
    assert isinstance(service.storage, LocalStorage)


def test_build_status_handler(settings):
    handler = bootstrap.build_status_handler(settings)

    assert isinstance(handler.jobs, RedisJobRepository)
