"""
Excel Importer

Streams an uploaded spreadsheet row by row into a domain row handler.

Responsibility:
    - Open the first worksheet of an .xlsx file (openpyxl, read-only mode)
    - Validate row 1 against the expected header set
    - Convert each data row into a Record keyed by the expected header names
    - Invoke the row handler for every non-blank row, one call at a time
    - Stop at the first handler error, citing the Excel row number

Architecture Notes:
    - Infrastructure Layer (depends on openpyxl library)
    - Used by BulkJobWorker; one instance per job
    - Read-only mode keeps memory flat for large files (rows are streamed,
      the sheet is never fully materialized)

Business Rules:
    - Headers match case-insensitively, ignoring surrounding whitespace,
      order and extra columns
    - All missing headers are reported at once, before any row runs
    - A file without data rows is rejected
    - Fully blank rows are skipped
    - No rollback: rows handled before a failure stay committed
"""

import logging
import threading
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Callable, Optional, Sequence
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from taskpilot_bulk.domain.shared.exceptions import (
    DomainException,
    EmptySheetError,
    ExcelParsingError,
    ImportCancelledError,
    MissingHeadersError,
    RowProcessingError,
)

logger = logging.getLogger(__name__)

Record = dict[str, str]
RowHandler = Callable[[Record, int], None]


class ExcelImporter:
    """
    Header-validating streaming reader for import files.

    The row handler is guarded by a per-instance lock, so even if one
    importer were shared between threads the handler would never run
    concurrently for it.

    Examples:
        >>> importer = ExcelImporter()
        >>> count = importer.import_file(
        ...     Path("/tmp/process/projects_1a2b3c4d.xlsx"),
        ...     expected_headers=("name", "description", "color"),
        ...     owner_id=7,
        ...     row_handler=handle_project_row,
        ... )
        >>> print(f"Imported {count} rows")
    """

    HEADER_ROW = 1

    def __init__(self) -> None:
        self._handler_lock = threading.Lock()

    def import_file(
        self,
        file_path: Path,
        expected_headers: Sequence[str],
        owner_id: int,
        row_handler: RowHandler,
        cancel_event: Optional[threading.Event] = None,
    ) -> int:
        """
        Validate headers, then feed every data row to row_handler.

        Args:
            file_path: Local path of the .xlsx file
            expected_headers: Required column names (Record keys)
            owner_id: Passed through to the handler as the acting user
            row_handler: Callable(record, owner_id); any exception aborts
            cancel_event: When set, the import stops before the next row

        Returns:
            Number of rows handled

        Raises:
            ExcelParsingError: If the file cannot be opened or read
            EmptySheetError: If there is no header row or no data rows
            MissingHeadersError: If expected headers are absent from row 1
            RowProcessingError: If the handler fails for a row
            ImportCancelledError: If cancel_event was set mid-import
        """
        workbook = self._open_workbook(file_path)
        try:
            worksheet = workbook.worksheets[0]
            rows = worksheet.iter_rows(values_only=True)

            header_cells = next(rows, None)
            if header_cells is None:
                raise EmptySheetError(f"Spreadsheet has no header row: {file_path.name}")

            column_map = self._map_headers(header_cells, expected_headers)

            handled = 0
            row_number = self.HEADER_ROW
            for row_number, cells in enumerate(rows, start=self.HEADER_ROW + 1):
                if cancel_event is not None and cancel_event.is_set():
                    raise ImportCancelledError(
                        f"Import cancelled at row {row_number} after {handled} rows"
                    )

                record = self._build_record(cells, column_map)
                if record is None:
                    continue

                self._handle_row(record, owner_id, row_number, row_handler)
                handled += 1

            if handled == 0:
                raise EmptySheetError(
                    f"Spreadsheet contains headers but no data rows: {file_path.name}"
                )

            logger.info(
                f"Imported {handled} rows from {file_path.name} "
                f"(last row {row_number})"
            )
            return handled

        finally:
            workbook.close()

    def _open_workbook(self, file_path: Path):
        if not file_path.exists():
            raise ExcelParsingError("File not found", file_path=str(file_path))
        try:
            return load_workbook(filename=file_path, read_only=True, data_only=True)
        except (InvalidFileException, BadZipFile, OSError, KeyError, ValueError) as e:
            raise ExcelParsingError(
                "Cannot open spreadsheet", file_path=str(file_path), original_error=e
            ) from e

    @staticmethod
    def _map_headers(
        header_cells: Sequence[Any], expected_headers: Sequence[str]
    ) -> dict[str, int]:
        """
        Map each expected header to its column index.

        First occurrence wins when a header is duplicated.

        Raises:
            MissingHeadersError: Listing every expected header not found
        """
        found: dict[str, int] = {}
        found_names: list[str] = []
        for index, cell in enumerate(header_cells):
            if cell is None:
                continue
            name = str(cell).strip()
            if not name:
                continue
            found_names.append(name)
            found.setdefault(name.lower(), index)

        column_map: dict[str, int] = {}
        missing: list[str] = []
        for header in expected_headers:
            index = found.get(header.strip().lower())
            if index is None:
                missing.append(header)
            else:
                column_map[header] = index

        if missing:
            raise MissingHeadersError(missing, found_headers=found_names)

        return column_map

    @classmethod
    def _build_record(
        cls, cells: Sequence[Any], column_map: dict[str, int]
    ) -> Optional[Record]:
        """Record for one row, or None if every mapped cell is blank."""
        record: Record = {}
        for header, index in column_map.items():
            value = cells[index] if index < len(cells) else None
            record[header] = cls._cell_to_text(value)

        if not any(record.values()):
            return None
        return record

    @staticmethod
    def _cell_to_text(value: Any) -> str:
        """Normalize a cell value to trimmed text."""
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            # Excel stores every number as float; 12.0 means 12
            return str(int(value))
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        return str(value).strip()

    def _handle_row(
        self,
        record: Record,
        owner_id: int,
        row_number: int,
        row_handler: RowHandler,
    ) -> None:
        with self._handler_lock:
            try:
                row_handler(record, owner_id)
            except DomainException as e:
                raise RowProcessingError(
                    e.message, row_number=row_number, original_error=e
                ) from e
            except Exception as e:
                logger.warning(f"Row {row_number} rejected by handler: {e}")
                raise RowProcessingError(
                    str(e) or type(e).__name__,
                    row_number=row_number,
                    original_error=e,
                ) from e
