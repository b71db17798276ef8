"""Tests for WorkerSettings loading and validation."""

from unittest.mock import patch

import pytest

from taskpilot_bulk.domain.shared.exceptions import ConfigurationError
from taskpilot_bulk.shared import config
from taskpilot_bulk.shared.config import WorkerSettings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def clear_cache():
    reset_settings()
    yield
    reset_settings()


def test_defaults():
    settings = WorkerSettings.from_env({})

    assert settings.storage_type == "local"
    assert settings.import_queue == "bulk_import_queue"
    assert settings.export_queue == "bulk_export_queue"
    assert settings.job_ttl_seconds == 7 * 24 * 3600
    assert settings.step_timeout_seconds == 30.0
    assert settings.data_service_factory is None
    assert settings.redis_max_connections == 10
    assert settings.redis_timeout_seconds == 5.0
    assert settings.redis_retry_attempts == 3


def test_values_read_from_upper_case_names():
    settings = WorkerSettings.from_env(
        {
            "REDIS_HOST": "redis-prod",
            "REDIS_PORT": "6380",
            "REDIS_MAX_CONNECTIONS": "25",
            "REDIS_RETRY_ATTEMPTS": "5",
            "STEP_TIMEOUT_SECONDS": "5.5",
            "STORAGE_TYPE": "s3",
            "S3_BUCKET": "taskpilot-bulk",
            "DATA_SERVICE_FACTORY": "tracker.services:build",
        }
    )

    assert settings.redis_host == "redis-prod"
    assert settings.redis_port == 6380
    assert settings.redis_max_connections == 25
    assert settings.redis_retry_attempts == 5
    assert settings.step_timeout_seconds == 5.5
    assert settings.s3_bucket == "taskpilot-bulk"
    assert settings.data_service_factory == "tracker.services:build"


def test_empty_values_fall_back_to_defaults():
    settings = WorkerSettings.from_env({"REDIS_HOST": "", "IMPORT_QUEUE": ""})

    assert settings.redis_host == "localhost"
    assert settings.import_queue == "bulk_import_queue"


@pytest.mark.parametrize(
    "env,fragment",
    [
        ({"STORAGE_TYPE": "s3"}, "S3_BUCKET"),
        ({"STORAGE_TYPE": "ftp"}, "storage_type"),
        ({"REDIS_PORT": "not-a-port"}, "redis_port"),
        ({"STEP_TIMEOUT_SECONDS": "0"}, "step_timeout_seconds"),
        ({"REDIS_RETRY_ATTEMPTS": "0"}, "redis_retry_attempts"),
        ({"IMPORT_QUEUE": "jobs", "EXPORT_QUEUE": "jobs"}, "must differ"),
    ],
)
def test_invalid_environment_raises_configuration_error(env, fragment):
    with pytest.raises(ConfigurationError, match=fragment):
        WorkerSettings.from_env(env)


def test_get_settings_is_cached():
    with patch.object(config, "load_dotenv") as load_dotenv:
        first = get_settings()
        second = get_settings()

    assert first is second
    load_dotenv.assert_called_once()


def test_reset_settings_rereads_environment(monkeypatch):
    with patch.object(config, "load_dotenv"):
        monkeypatch.setenv("REDIS_HOST", "first-host")
        assert get_settings().redis_host == "first-host"

        monkeypatch.setenv("REDIS_HOST", "second-host")
        reset_settings()
        assert get_settings().redis_host == "second-host"
