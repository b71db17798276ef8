"""
Excel Exporter

Builds export workbooks with openpyxl.

Responsibility:
    - Start a sheet with the header row id, <domain columns>, created_at, updated_at
    - Append one row per projected entity
    - Save the workbook to a local directory for upload

Architecture Notes:
    - Infrastructure Layer (depends on openpyxl library)
    - Used by BulkJobWorker; one instance per job
    - open(), add_row() and save() share one lock, because the worksheet
      and its next-row counter are mutable state

Business Rules:
    - Cell values are stable across runs: datetimes become ISO-8601 text,
      None becomes an empty cell
    - A sheet without add_row() calls is saved as a header-only file
"""

import logging
import threading
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from taskpilot_bulk.domain.tracker.constants import (
    EXPORT_LEADING_COLUMNS,
    EXPORT_TRAILING_COLUMNS,
)

logger = logging.getLogger(__name__)


class ExcelExporter:
    """
    Sheet builder for export files.

    Examples:
        >>> exporter = ExcelExporter(("name", "description", "color"), sheet_title="projects")
        >>> exporter.open("projects_export_7_20250111T103045_1a2b3c4d.xlsx")
        >>> exporter.add_row([1, "Apollo", "", "#ff0000", created, updated])
        >>> path = exporter.save(Path("/tmp/process"))
    """

    def __init__(self, columns: Sequence[str], sheet_title: Optional[str] = None) -> None:
        """
        Args:
            columns: Domain columns placed between id and the timestamps
            sheet_title: Worksheet title (default: openpyxl's "Sheet")
        """
        self.headers: list[str] = [
            *EXPORT_LEADING_COLUMNS,
            *columns,
            *EXPORT_TRAILING_COLUMNS,
        ]
        self.sheet_title = sheet_title
        self.filename: Optional[str] = None
        self.rows_written = 0

        self._lock = threading.Lock()
        self._workbook: Optional[Workbook] = None
        self._worksheet: Optional[Worksheet] = None
        self._next_row = 1

    def open(self, filename: str) -> None:
        """
        Start a new workbook for filename and write the header row.

        Calling open() again discards any rows added so far.
        """
        with self._lock:
            workbook = Workbook()
            worksheet = workbook.active
            if self.sheet_title:
                worksheet.title = self.sheet_title

            for column, header in enumerate(self.headers, start=1):
                worksheet.cell(row=1, column=column, value=header)

            self._workbook = workbook
            self._worksheet = worksheet
            self._next_row = 2
            self.rows_written = 0
            self.filename = filename

        logger.debug(f"Export sheet opened for {filename} ({len(self.headers)} columns)")

    def add_row(self, values: Sequence[Any]) -> int:
        """
        Append one data row at the next free row index.

        Args:
            values: One value per header, in header order

        Returns:
            Excel row number that was written

        Raises:
            RuntimeError: If open() was not called
            ValueError: If the value count does not match the header count
        """
        if len(values) != len(self.headers):
            raise ValueError(
                f"Export row has {len(values)} values, expected {len(self.headers)}"
            )

        with self._lock:
            worksheet = self._require_open()
            row = self._next_row
            for column, value in enumerate(values, start=1):
                worksheet.cell(row=row, column=column, value=self._to_cell_value(value))
            self._next_row += 1
            self.rows_written += 1
            return row

    def save(self, directory: Path) -> Path:
        """
        Write the workbook to directory/filename.

        Returns:
            Path of the saved file

        Raises:
            RuntimeError: If open() was not called
            OSError: If the file cannot be written
        """
        with self._lock:
            self._require_open()
            output_path = Path(directory) / self.filename
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self._workbook.save(output_path)

        logger.info(f"Export saved: {output_path} ({self.rows_written} data rows)")
        return output_path

    def _require_open(self) -> Worksheet:
        if self._worksheet is None or self.filename is None:
            raise RuntimeError("ExcelExporter.open() must be called first")
        return self._worksheet

    @staticmethod
    def _to_cell_value(value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, (int, float)):
            return value
        # Control characters raise IllegalCharacterError in openpyxl
        return ILLEGAL_CHARACTERS_RE.sub("", str(value))
