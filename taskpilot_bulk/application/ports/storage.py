"""
Storage Client Port

Protocol implemented by the local-disk and S3 storage backends. The worker
and the submission service depend only on this interface, so the backend is
chosen once at startup (STORAGE_TYPE) and never branched on afterwards.
"""

from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class StorageClientProtocol(Protocol):
    """
    Uniform blob abstraction.

    Contract:
        - upload(): persist bytes under name; raises StorageError on I/O failure
        - download(): materialize blob locally, return the local path;
          raises BlobNotFoundError if the blob is missing
        - delete(): remove durable and local copies; raises StorageError,
          callers treat the failure as best-effort
        - generate_signed_url(): time-bounded GET link (local backend may
          return a filesystem path)
    """

    def upload(self, stream: BinaryIO, name: str) -> None: ...

    def download(self, name: str) -> Path: ...

    def delete(self, name: str) -> None: ...

    def generate_signed_url(self, name: str, ttl: timedelta) -> str: ...
