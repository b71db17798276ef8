"""
Worker Settings

Environment-driven configuration for the bulk subsystem, loaded once per
process. Values come from the environment, optionally seeded from a .env
file (python-dotenv), and are validated by a pydantic model so a broken
deployment fails at startup instead of inside the first job.

Environment variables:
    CELERY_BROKER_URL       Broker URL (default redis://localhost:6379/0)
    CELERY_RESULT_BACKEND   Result backend (default redis://localhost:6379/1)
    IMPORT_QUEUE            Import queue name (default bulk_import_queue)
    EXPORT_QUEUE            Export queue name (default bulk_export_queue)
    REDIS_HOST / REDIS_PORT / REDIS_DB
                            Job repository connection
    REDIS_MAX_CONNECTIONS / REDIS_TIMEOUT_SECONDS / REDIS_RETRY_ATTEMPTS
                            Pool size, socket timeout and startup PING attempts
    JOB_TTL_SECONDS         Lifetime of job records (default 7 days)
    STORAGE_TYPE            "local" or "s3" (default local)
    UPLOAD_DIR / PROCESS_DIR
                            Durable and working directories of local storage
    S3_BUCKET / S3_PREFIX / S3_ENDPOINT_URL / S3_REGION
                            Object store location (S3_BUCKET required for s3)
    AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY
                            Optional explicit credentials
    STEP_TIMEOUT_SECONDS    Bound of one external call (default 30)
    IMPORT_TIMEOUT_SECONDS  Bound of a whole import parse (default 600)
    DATA_SERVICE_FACTORY    Dotted path "module:callable" or "module.callable"
                            returning the data-access service

Examples:
    >>> settings = get_settings()
    >>> settings.storage_type
    'local'
"""

import logging
import os
import threading
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from taskpilot_bulk.domain.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_settings: Optional["WorkerSettings"] = None
_settings_lock = threading.Lock()


class WorkerSettings(BaseModel):
    """Validated runtime configuration."""

    model_config = ConfigDict(frozen=True)

    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/1"
    import_queue: str = Field(default="bulk_import_queue", min_length=1)
    export_queue: str = Field(default="bulk_export_queue", min_length=1)

    redis_host: str = "localhost"
    redis_port: int = Field(default=6379, gt=0)
    redis_db: int = Field(default=0, ge=0)
    redis_max_connections: int = Field(default=10, gt=0)
    redis_timeout_seconds: float = Field(default=5.0, gt=0)
    redis_retry_attempts: int = Field(default=3, gt=0)
    job_ttl_seconds: int = Field(default=7 * 24 * 3600, gt=0)

    storage_type: Literal["local", "s3"] = "local"
    upload_dir: str = "/tmp/taskpilot/uploads"
    process_dir: str = "/tmp/taskpilot/process"
    s3_bucket: Optional[str] = None
    s3_prefix: str = ""
    s3_endpoint_url: Optional[str] = None
    s3_region: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None

    step_timeout_seconds: float = Field(default=30.0, gt=0)
    import_timeout_seconds: float = Field(default=600.0, gt=0)

    data_service_factory: Optional[str] = None

    @model_validator(mode="after")
    def _check_storage(self) -> "WorkerSettings":
        if self.storage_type == "s3" and not self.s3_bucket:
            raise ValueError("S3_BUCKET is required when STORAGE_TYPE=s3")
        if self.import_queue == self.export_queue:
            raise ValueError("IMPORT_QUEUE and EXPORT_QUEUE must differ")
        return self

    @classmethod
    def from_env(cls, env: Optional[dict[str, str]] = None) -> "WorkerSettings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read instead of os.environ (tests)

        Raises:
            ConfigurationError: If a value is missing, malformed or inconsistent
        """
        source = os.environ if env is None else env
        raw = {
            name: source[name.upper()]
            for name in cls.model_fields
            if source.get(name.upper()) not in (None, "")
        }
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
                for err in e.errors()
            )
            raise ConfigurationError(f"Invalid worker configuration: {details}") from e


def get_settings() -> WorkerSettings:
    """
    Return the process-wide settings, loading .env and parsing on first call.

    Raises:
        ConfigurationError: If the environment is invalid
    """
    global _settings

    if _settings is None:
        with _settings_lock:
            if _settings is None:
                load_dotenv()
                _settings = WorkerSettings.from_env()
                logger.info(
                    f"Worker settings loaded: storage={_settings.storage_type}, "
                    f"queues={_settings.import_queue}/{_settings.export_queue}, "
                    f"redis={_settings.redis_host}:{_settings.redis_port}/{_settings.redis_db}"
                )
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings

    with _settings_lock:
        _settings = None
