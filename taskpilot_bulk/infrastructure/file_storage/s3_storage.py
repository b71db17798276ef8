"""
S3 File Storage

Object-store StorageClientProtocol implementation over boto3. Works with AWS
S3 and S3-compatible servers (MinIO, Ceph) through an endpoint URL.

Storage Structure:
    Durable copies:   s3://{bucket}/{prefix}/{blob_name}
    Working copies:   {PROCESS_DIR}/{blob_name}

Business Rules:
    - Signed URLs are presigned GET requests with the given ttl
    - A 404/NoSuchKey from S3 becomes BlobNotFoundError, every other
      botocore error becomes StorageError
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Optional

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from taskpilot_bulk.domain.shared.exceptions import BlobNotFoundError, StorageError
from taskpilot_bulk.domain.tracker.constants import XLSX_CONTENT_TYPE
from taskpilot_bulk.shared.utils.filenames import validate_blob_name

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def create_s3_client(
    endpoint_url: Optional[str] = None,
    region_name: Optional[str] = None,
    access_key: Optional[str] = None,
    secret_key: Optional[str] = None,
) -> BaseClient:
    """
    Build a boto3 S3 client.

    Credentials fall back to the default boto3 chain when not given.
    Path-style addressing is used when an endpoint is set, since most
    S3-compatible servers don't serve virtual-host buckets.
    """
    config = Config(
        signature_version="s3v4",
        retries={"max_attempts": 3, "mode": "standard"},
        s3={"addressing_style": "path"} if endpoint_url else None,
    )
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        region_name=region_name,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        config=config,
    )


class S3Storage:
    """
    Storage in an S3 bucket.

    Examples:
        >>> storage = S3Storage(create_s3_client(), "taskpilot-bulk", "/tmp/process", prefix="uploads")
        >>> link = storage.generate_signed_url("tasks_export_7_x.xlsx", timedelta(minutes=10))
    """

    def __init__(
        self,
        client: BaseClient,
        bucket: str,
        process_dir: str,
        prefix: str = "",
    ) -> None:
        if not bucket:
            raise StorageError("S3 bucket name is required")
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.process_dir = Path(process_dir)
        try:
            self.process_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("Cannot create process directory", original_error=e) from e

    def _key(self, name: str) -> str:
        validate_blob_name(name)
        return f"{self.prefix}/{name}" if self.prefix else name

    @staticmethod
    def _is_not_found(error: ClientError) -> bool:
        return str(error.response.get("Error", {}).get("Code", "")) in _NOT_FOUND_CODES

    def upload(self, stream: BinaryIO, name: str) -> None:
        key = self._key(name)
        try:
            self.client.upload_fileobj(
                stream,
                self.bucket,
                key,
                ExtraArgs={"ContentType": XLSX_CONTENT_TYPE},
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Upload failed", blob_name=name, original_error=e) from e

        logger.info(f"Uploaded blob {name} to s3://{self.bucket}/{key}")

    def download(self, name: str) -> Path:
        key = self._key(name)
        target = self.process_dir / name
        try:
            self.client.download_file(self.bucket, key, str(target))
        except ClientError as e:
            target.unlink(missing_ok=True)
            if self._is_not_found(e):
                raise BlobNotFoundError("Blob not found", blob_name=name, original_error=e) from e
            raise StorageError("Download failed", blob_name=name, original_error=e) from e
        except (BotoCoreError, OSError) as e:
            target.unlink(missing_ok=True)
            raise StorageError("Download failed", blob_name=name, original_error=e) from e

        logger.debug(f"Downloaded s3://{self.bucket}/{key} to {target}")
        return target

    def delete(self, name: str) -> None:
        key = self._key(name)
        local_error: Optional[OSError] = None
        try:
            (self.process_dir / name).unlink(missing_ok=True)
        except OSError as e:
            local_error = e

        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Delete failed", blob_name=name, original_error=e) from e

        if local_error is not None:
            raise StorageError("Delete failed", blob_name=name, original_error=local_error)
        logger.info(f"Deleted blob {name} from s3://{self.bucket}/{key}")

    def generate_signed_url(self, name: str, ttl: timedelta) -> str:
        key = self._key(name)
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=int(ttl.total_seconds()),
                HttpMethod="GET",
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError("Signing failed", blob_name=name, original_error=e) from e
