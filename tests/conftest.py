"""
Pytest Configuration and Shared Fixtures

Fixtures:
    - data_service: FakeDataService with one known user
    - job_repository: InMemoryJobRepository
    - local_storage: LocalStorage under tmp_path
    - make_workbook: writes an .xlsx with openpyxl and returns its path

Architecture Notes:
    - Unit tests never touch a real Redis, S3 or broker; those are mocked
      (unittest.mock) or replaced by in-memory implementations
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import pytest
from openpyxl import Workbook

from taskpilot_bulk.infrastructure.file_storage.local_storage import LocalStorage
from taskpilot_bulk.infrastructure.persistence.in_memory.job_repository import (
    InMemoryJobRepository,
)
from tests.fakes import FakeDataService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@pytest.fixture
def data_service() -> FakeDataService:
    service = FakeDataService()
    service.add_user(42, "alice@example.com")
    return service


@pytest.fixture
def job_repository() -> InMemoryJobRepository:
    return InMemoryJobRepository()


@pytest.fixture
def local_storage(tmp_path) -> LocalStorage:
    return LocalStorage(str(tmp_path / "uploads"), str(tmp_path / "process"))


@pytest.fixture
def make_workbook(tmp_path) -> Callable[..., Path]:
    """
    Build a spreadsheet in tmp_path.

    Usage:
        path = make_workbook([["name", "description", "color"], ["Apollo", "", "red"]])
    """

    def _make(rows: Sequence[Sequence[Any]], name: str = "input.xlsx", directory: Optional[Path] = None) -> Path:
        workbook = Workbook()
        worksheet = workbook.active
        for row in rows:
            worksheet.append(list(row))
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(target)
        return target

    return _make
