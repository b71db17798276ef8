"""
Tests for LocalStorage.

Covers:
- Upload/download/delete lifecycle across the upload and process directories
- Blob name validation
- Local "signed" links
"""

import io
from datetime import timedelta

import pytest

from taskpilot_bulk.domain.shared.exceptions import BlobNotFoundError, StorageError
from taskpilot_bulk.infrastructure.file_storage.local_storage import LocalStorage
from taskpilot_bulk.shared.utils.filenames import validate_blob_name


def test_directories_are_created(tmp_path):
    storage = LocalStorage(str(tmp_path / "a" / "uploads"), str(tmp_path / "b" / "process"))

    assert storage.upload_dir.is_dir()
    assert storage.process_dir.is_dir()


def test_upload_writes_durable_copy(local_storage):
    local_storage.upload(io.BytesIO(b"xlsx-bytes"), "projects_1a2b3c4d.xlsx")

    durable = local_storage.upload_dir / "projects_1a2b3c4d.xlsx"
    assert durable.read_bytes() == b"xlsx-bytes"
    assert not (local_storage.upload_dir / "projects_1a2b3c4d.xlsx.tmp").exists()


def test_upload_replaces_existing_blob(local_storage):
    local_storage.upload(io.BytesIO(b"old"), "a.xlsx")
    local_storage.upload(io.BytesIO(b"new"), "a.xlsx")

    assert (local_storage.upload_dir / "a.xlsx").read_bytes() == b"new"


def test_download_copies_into_process_dir(local_storage):
    local_storage.upload(io.BytesIO(b"data"), "a.xlsx")

    path = local_storage.download("a.xlsx")

    assert path == local_storage.process_dir / "a.xlsx"
    assert path.read_bytes() == b"data"
    assert (local_storage.upload_dir / "a.xlsx").exists()


def test_download_missing_blob_raises(local_storage):
    with pytest.raises(BlobNotFoundError):
        local_storage.download("missing.xlsx")


def test_delete_removes_both_copies(local_storage):
    local_storage.upload(io.BytesIO(b"data"), "a.xlsx")
    local_storage.download("a.xlsx")

    local_storage.delete("a.xlsx")

    assert not (local_storage.upload_dir / "a.xlsx").exists()
    assert not (local_storage.process_dir / "a.xlsx").exists()


def test_delete_missing_blob_is_noop(local_storage):
    local_storage.delete("never-uploaded.xlsx")


def test_signed_url_is_durable_path(local_storage):
    local_storage.upload(io.BytesIO(b"data"), "export.xlsx")

    url = local_storage.generate_signed_url("export.xlsx", timedelta(minutes=10))

    assert url == str((local_storage.upload_dir / "export.xlsx").resolve())


def test_signed_url_for_missing_blob_raises(local_storage):
    with pytest.raises(BlobNotFoundError):
        local_storage.generate_signed_url("missing.xlsx", timedelta(minutes=10))


@pytest.mark.parametrize("name", ["", ".", "..", "../etc/passwd", "a/b.xlsx", "a\\b.xlsx"])
def test_invalid_blob_names_rejected(name):
    with pytest.raises(StorageError, match="Invalid blob name"):
        validate_blob_name(name)


def test_upload_rejects_path_traversal(local_storage):
    with pytest.raises(StorageError):
        local_storage.upload(io.BytesIO(b"x"), "../escape.xlsx")
    assert not (local_storage.upload_dir.parent / "escape.xlsx").exists()
