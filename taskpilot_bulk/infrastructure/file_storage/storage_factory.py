"""Storage backend selection from settings (STORAGE_TYPE)."""

import logging

from taskpilot_bulk.application.ports.storage import StorageClientProtocol
from taskpilot_bulk.domain.shared.exceptions import ConfigurationError
from taskpilot_bulk.infrastructure.file_storage.local_storage import LocalStorage
from taskpilot_bulk.infrastructure.file_storage.s3_storage import S3Storage, create_s3_client
from taskpilot_bulk.shared.config import WorkerSettings

logger = logging.getLogger(__name__)


def create_storage(settings: WorkerSettings) -> StorageClientProtocol:
    """
    Build the configured storage backend.

    Raises:
        ConfigurationError: If the storage type is unknown or incomplete
    """
    if settings.storage_type == "local":
        logger.info(
            f"Using local storage (uploads={settings.upload_dir}, "
            f"process={settings.process_dir})"
        )
        return LocalStorage(settings.upload_dir, settings.process_dir)

    if settings.storage_type == "s3":
        if not settings.s3_bucket:
            raise ConfigurationError("S3_BUCKET is required when STORAGE_TYPE=s3")
        logger.info(
            f"Using S3 storage (bucket={settings.s3_bucket}, prefix={settings.s3_prefix!r}, "
            f"endpoint={settings.s3_endpoint_url or 'aws'})"
        )
        client = create_s3_client(
            endpoint_url=settings.s3_endpoint_url,
            region_name=settings.s3_region,
            access_key=settings.aws_access_key_id,
            secret_key=settings.aws_secret_access_key,
        )
        return S3Storage(
            client,
            settings.s3_bucket,
            settings.process_dir,
            prefix=settings.s3_prefix,
        )

    raise ConfigurationError(f"Unknown STORAGE_TYPE: {settings.storage_type!r}")
