"""
Local File Storage

Disk-backed StorageClientProtocol implementation.

Storage Structure:
    Durable copies:   {UPLOAD_DIR}/{blob_name}
    Working copies:   {PROCESS_DIR}/{blob_name}

    upload() writes the durable copy, download() copies it into the process
    directory and returns that path, delete() removes both.

Business Rules:
    - Blob names are flat (no directories); separators and ".." are rejected
    - Writes are atomic: data goes to {name}.tmp, then is renamed into place
    - generate_signed_url() returns the durable file path; there is no
      expiry on local disk, the ttl is only logged
"""

import logging
import shutil
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Optional

from taskpilot_bulk.domain.shared.exceptions import BlobNotFoundError, StorageError
from taskpilot_bulk.shared.utils.filenames import validate_blob_name

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Storage on the local file system.

    Examples:
        >>> storage = LocalStorage("/tmp/taskpilot/uploads", "/tmp/taskpilot/process")
        >>> with open("projects.xlsx", "rb") as f:
        ...     storage.upload(f, "projects_1a2b3c4d.xlsx")
        >>> local_path = storage.download("projects_1a2b3c4d.xlsx")
        >>> storage.delete("projects_1a2b3c4d.xlsx")
    """

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, upload_dir: str, process_dir: str) -> None:
        """
        Create both directories if missing.

        Raises:
            StorageError: If a directory cannot be created
        """
        self.upload_dir = Path(upload_dir)
        self.process_dir = Path(process_dir)
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            self.process_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError("Cannot create storage directories", original_error=e) from e

    def _durable_path(self, name: str) -> Path:
        return self.upload_dir / validate_blob_name(name)

    def _process_path(self, name: str) -> Path:
        return self.process_dir / validate_blob_name(name)

    def upload(self, stream: BinaryIO, name: str) -> None:
        target = self._durable_path(name)
        tmp_path = target.with_name(target.name + ".tmp")
        try:
            with tmp_path.open("wb") as out:
                shutil.copyfileobj(stream, out, self.CHUNK_SIZE)
            tmp_path.replace(target)
        except OSError as e:
            self._remove_quietly(tmp_path)
            raise StorageError("Upload failed", blob_name=name, original_error=e) from e

        logger.info(f"Uploaded blob {name} to {target} ({target.stat().st_size} bytes)")

    def download(self, name: str) -> Path:
        source = self._durable_path(name)
        if not source.is_file():
            raise BlobNotFoundError("Blob not found", blob_name=name)

        target = self._process_path(name)
        try:
            shutil.copyfile(source, target)
        except FileNotFoundError as e:
            raise BlobNotFoundError("Blob not found", blob_name=name, original_error=e) from e
        except OSError as e:
            raise StorageError("Download failed", blob_name=name, original_error=e) from e

        logger.debug(f"Downloaded blob {name} to {target}")
        return target

    def delete(self, name: str) -> None:
        errors: list[OSError] = []
        for path in (self._durable_path(name), self._process_path(name)):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                errors.append(e)

        if errors:
            raise StorageError("Delete failed", blob_name=name, original_error=errors[0])
        logger.info(f"Deleted blob {name}")

    def generate_signed_url(self, name: str, ttl: timedelta) -> str:
        path = self._durable_path(name)
        if not path.is_file():
            raise BlobNotFoundError("Blob not found", blob_name=name)
        logger.debug(f"Local link for {name} (ttl {ttl} not enforced on local disk)")
        return str(path.resolve())

    @staticmethod
    def _remove_quietly(path: Optional[Path]) -> None:
        if path is None:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove temporary file {path}: {e}")
