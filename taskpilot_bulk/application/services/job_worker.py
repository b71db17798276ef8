"""
Bulk Job Worker

Processes one queued import or export job from payload to terminal status.

Responsibility:
    - Deserialize the queue payload (malformed -> NACK, no job mutation)
    - Run the import or export pipeline for the job kind
    - Bound every external call by a timeout
    - Record the terminal status (and result URL) in the job repository
    - Return the acknowledgement decision for the delivery

Architecture Notes:
    - Part of Application Layer (Services)
    - Depends only on ports (storage, job repository, data-access service)
    - Fresh ExcelImporter/ExcelExporter per job; no state shared between jobs
    - Called by the Celery tasks, which translate JobOutcome into ack/reject

Import pipeline (linear, no loop-back):
    1. DOWNLOAD: storage.download(filename)            -> failed on error
    2. IMPORT: header check + row handler per row      -> failed on error
    3. COMPLETE: status completed, ACK
    Always: delete the uploaded blob; a failed delete is only logged

Export pipeline:
    1. OPEN: new sheet for filename
    2. QUERY: owner's projects / project's tasks (empty -> header-only file)
    3. WRITE: one row per entity
    4. SAVE + UPLOAD: local file -> durable storage, local file removed
    5. SIGN: 10-minute GET URL stored on the job, then status completed
    Any failure -> failed, NACK; a blob already uploaded is deleted

Logging:
    Each stage logged as "job_id | memory MB | STAGE | message".
"""

import logging
import threading
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

from taskpilot_bulk.application.models import (
    ExportJobMessage,
    ImportJobMessage,
    JobKind,
    JobOutcome,
    JobStatus,
)
from taskpilot_bulk.application.ports.data_access import TrackerDataServiceProtocol
from taskpilot_bulk.application.ports.job_repository import JobRepositoryProtocol
from taskpilot_bulk.application.ports.storage import StorageClientProtocol
from taskpilot_bulk.application.services.row_handlers import (
    ProjectRowHandler,
    TaskRowHandler,
    project_to_row,
    task_to_row,
)
from taskpilot_bulk.domain.shared.exceptions import DomainException, InvalidJobMessageError
from taskpilot_bulk.domain.tracker.constants import (
    PROJECT_EXPORT_COLUMNS,
    PROJECT_IMPORT_HEADERS,
    PROJECT_SHEET_NAME,
    RESULT_URL_TTL,
    TASK_EXPORT_COLUMNS,
    TASK_IMPORT_HEADERS,
    TASK_SHEET_NAME,
)
from taskpilot_bulk.infrastructure.file_storage.excel_exporter import ExcelExporter
from taskpilot_bulk.infrastructure.file_storage.excel_importer import ExcelImporter
from taskpilot_bulk.shared.utils import call_with_timeout, memory_usage_mb

logger = logging.getLogger(__name__)


def describe_error(error: BaseException) -> str:
    """User-facing text of an error, without the exception class prefix."""
    if isinstance(error, DomainException):
        return error.message
    text = str(error)
    return f"{type(error).__name__}: {text}" if text else type(error).__name__


class StepFailedError(DomainException):
    """
    Wraps the error of one pipeline step so the job message names the step.

    Examples:
        "Download failed: Blob not found | Blob: projects_1a2b3c4d.xlsx"
        "Import failed: Missing required headers: color"
    """

    def __init__(self, step: str, error: Exception) -> None:
        self.step = step
        self.original_error = error
        super().__init__(f"{step} failed: {describe_error(error)}")


class BulkJobWorker:
    """
    Orchestrates storage, spreadsheet codec, data service and job repository.

    Examples:
        >>> worker = BulkJobWorker(storage, jobs, data_service, process_dir="/tmp/process")
        >>> worker.handle_import(payload)
        <JobOutcome.ACK: 'ack'>
    """

    def __init__(
        self,
        storage: StorageClientProtocol,
        jobs: JobRepositoryProtocol,
        data_service: TrackerDataServiceProtocol,
        process_dir: str,
        step_timeout: Optional[float] = 30.0,
        import_timeout: Optional[float] = 600.0,
        importer_factory: Callable[[], ExcelImporter] = ExcelImporter,
        exporter_factory: Callable[..., ExcelExporter] = ExcelExporter,
    ) -> None:
        self.storage = storage
        self.jobs = jobs
        self.data_service = data_service
        self.process_dir = Path(process_dir)
        self.step_timeout = step_timeout
        self.import_timeout = import_timeout
        self.importer_factory = importer_factory
        self.exporter_factory = exporter_factory

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def handle_import(self, payload: Any) -> JobOutcome:
        """
        Run the import pipeline for one delivery.

        Returns:
            JobOutcome.ACK on success, JobOutcome.NACK otherwise
        """
        try:
            message = ImportJobMessage.from_payload(payload)
        except InvalidJobMessageError as e:
            logger.error(f"Rejecting import message: {e.message}")
            return JobOutcome.NACK

        job_id = str(message.job_id)
        owner_id = message.user_id
        self._log_stage(job_id, "START", f"{message.kind.value} of {message.filename}")

        try:
            local_path = self._step(
                job_id, "Download", partial(self.storage.download, message.filename)
            )
            self._log_stage(job_id, "DOWNLOADED", str(local_path))

            headers, row_handler = self._import_plan(message.kind)
            importer = self.importer_factory()
            cancel_event = threading.Event()
            rows = self._step(
                job_id,
                "Import",
                partial(
                    importer.import_file,
                    local_path,
                    headers,
                    owner_id,
                    row_handler,
                    cancel_event,
                ),
                timeout=self.import_timeout,
                cancel_event=cancel_event,
            )
            self._log_stage(job_id, "IMPORTED", f"{rows} rows")

            self.jobs.update_status(job_id, owner_id, JobStatus.COMPLETED)
            self._log_stage(job_id, "COMPLETE", "import completed")
            return JobOutcome.ACK

        except Exception as e:
            self._fail(job_id, owner_id, e)
            return JobOutcome.NACK

        finally:
            self._delete_blob(job_id, message.filename)

    def _import_plan(
        self, kind: JobKind
    ) -> tuple[Sequence[str], Callable[[dict[str, str], int], None]]:
        if kind is JobKind.IMPORT_PROJECT:
            return PROJECT_IMPORT_HEADERS, ProjectRowHandler(self.data_service)
        if kind is JobKind.IMPORT_TASK:
            return TASK_IMPORT_HEADERS, TaskRowHandler(self.data_service, self.data_service)
        raise ValueError(f"Not an import kind: {kind.value}")

    def _delete_blob(self, job_id: str, filename: str) -> None:
        try:
            call_with_timeout(
                partial(self.storage.delete, filename), self.step_timeout, "delete"
            )
            logger.debug(f"Job {job_id}: uploaded blob {filename} deleted")
        except Exception as e:
            logger.warning(f"Job {job_id}: failed to delete blob {filename}: {e}")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def handle_export(self, payload: Any) -> JobOutcome:
        """
        Run the export pipeline for one delivery.

        Returns:
            JobOutcome.ACK on success, JobOutcome.NACK otherwise
        """
        try:
            message = ExportJobMessage.from_payload(payload)
        except InvalidJobMessageError as e:
            logger.error(f"Rejecting export message: {e.message}")
            return JobOutcome.NACK

        job_id = str(message.job_id)
        owner_id = message.user_id
        self._log_stage(job_id, "START", f"{message.kind.value} to {message.filename}")

        uploaded = False
        try:
            columns, sheet_title, fetch, to_row = self._export_plan(message)

            exporter = self.exporter_factory(columns, sheet_title=sheet_title)
            exporter.open(message.filename)

            entities = self._step(job_id, "Query", lambda: list(fetch()))
            for entity in entities:
                exporter.add_row(to_row(entity))
            self._log_stage(job_id, "ROWS_WRITTEN", f"{len(entities)} rows")

            local_path = self._step(
                job_id, "Save", partial(exporter.save, self.process_dir)
            )
            try:
                with local_path.open("rb") as stream:
                    self._step(
                        job_id,
                        "Upload",
                        partial(self.storage.upload, stream, message.filename),
                    )
            finally:
                self._remove_local(job_id, local_path)
            uploaded = True
            self._log_stage(job_id, "UPLOADED", message.filename)

            url = self._step(
                job_id,
                "Signing",
                partial(self.storage.generate_signed_url, message.filename, RESULT_URL_TTL),
            )
            self.jobs.set_result_url(job_id, owner_id, url)
            self.jobs.update_status(job_id, owner_id, JobStatus.COMPLETED)
            self._log_stage(job_id, "COMPLETE", "export completed")
            return JobOutcome.ACK

        except Exception as e:
            self._fail(job_id, owner_id, e)
            if uploaded:
                self._delete_blob(job_id, message.filename)
            return JobOutcome.NACK

    def _export_plan(
        self, message: ExportJobMessage
    ) -> tuple[Sequence[str], str, Callable[[], Sequence[Any]], Callable[[Any], list[Any]]]:
        if message.kind is JobKind.EXPORT_PROJECT:
            return (
                PROJECT_EXPORT_COLUMNS,
                PROJECT_SHEET_NAME,
                partial(self.data_service.list_projects_by_owner, message.user_id),
                project_to_row,
            )
        if message.kind is JobKind.EXPORT_TASK:
            return (
                TASK_EXPORT_COLUMNS,
                TASK_SHEET_NAME,
                partial(self.data_service.list_tasks_by_project, message.project_id),
                task_to_row,
            )
        raise ValueError(f"Not an export kind: {message.kind.value}")

    @staticmethod
    def _remove_local(job_id: str, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Job {job_id}: failed to remove local export {path}: {e}")

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _step(
        self,
        job_id: str,
        step: str,
        func: Callable[[], Any],
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Any:
        """Run one external call under its timeout, tagging errors with the step."""
        logger.debug(f"Job {job_id}: {step} started")
        try:
            return call_with_timeout(
                func,
                self.step_timeout if timeout is None else timeout,
                step.lower(),
                cancel_event=cancel_event,
            )
        except Exception as e:
            raise StepFailedError(step, e) from e

    def _fail(self, job_id: str, owner_id: int, error: Exception) -> None:
        message = describe_error(error)
        if isinstance(error, DomainException):
            logger.error(f"Job {job_id} failed: {message}")
        else:
            logger.exception(f"Job {job_id} failed with unexpected error: {message}")

        try:
            self.jobs.update_status(job_id, owner_id, JobStatus.FAILED, message)
        except Exception as e:
            logger.error(f"Job {job_id}: could not record failure: {describe_error(e)}")
        self._log_stage(job_id, "FAILED", message)

    @staticmethod
    def _log_stage(job_id: str, stage: str, message: str) -> None:
        logger.info(f"{job_id} | {memory_usage_mb():.1f}MB | {stage} | {message}")
