"""Blob name generation and checking."""

from pathlib import PurePath
from uuid import uuid4

from taskpilot_bulk.domain.shared.exceptions import StorageError


def unique_filename(original: str, default_stem: str = "upload") -> str:
    """
    Build a storage name that cannot collide with concurrent uploads.

    Keeps only the base name of the client-supplied filename (no directories)
    and appends 8 random hex chars before the extension.

    Examples:
        >>> unique_filename("../Projects Q1.xlsx")  # doctest: +SKIP
        'Projects_Q1_9f1c2a7b.xlsx'
    """
    base = PurePath(original.replace("\\", "/")).name if original else ""
    path = PurePath(base)
    stem = "_".join(path.stem.split()) or default_stem
    return f"{stem}_{uuid4().hex[:8]}{path.suffix.lower()}"


def validate_blob_name(name: str) -> str:
    """
    Reject names that could escape the storage directories.

    Raises:
        StorageError: If name is empty or contains path components
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise StorageError("Invalid blob name", blob_name=name or "<empty>")
    return name
