"""
Job Submission Service

Responsibility:
    Entry point for bulk requests coming from the tracker's HTTP layer.
    Stores uploads, creates the PENDING job record and publishes the job
    descriptor to the queue.

Architecture Notes:
    - Part of Application Layer (Services)
    - Depends on ports only (storage, job repository, publisher)
    - Returns the job id; clients poll GetJobStatusQueryHandler afterwards

Contains:
    - JobSubmissionService: import/export submission use cases
    - SubmittedJob: DTO returned to the caller

Does NOT contain:
    - HTTP concerns (multipart parsing, auth)
    - Job processing (BulkJobWorker)

Publish failure:
    If the queue rejects the descriptor, the job just created would stay
    PENDING forever. The service marks it FAILED ("failed to enqueue job")
    before raising JobEnqueueError. If that update fails too it is logged
    and the job is left PENDING.
"""

import logging
from datetime import datetime, timezone
from typing import BinaryIO, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from taskpilot_bulk.application.models import (
    ExportJobMessage,
    ImportJobMessage,
    JobKind,
    JobStatus,
)
from taskpilot_bulk.application.ports.job_repository import JobRepositoryProtocol
from taskpilot_bulk.application.ports.publisher import JobPublisherProtocol
from taskpilot_bulk.application.ports.storage import StorageClientProtocol
from taskpilot_bulk.domain.shared.exceptions import JobEnqueueError
from taskpilot_bulk.shared.utils import unique_filename

logger = logging.getLogger(__name__)

ENQUEUE_FAILED_MESSAGE = "failed to enqueue job"
ALLOWED_EXTENSIONS = (".xlsx",)


# ============================================================================
# DATA TRANSFER OBJECTS (DTOs)
# ============================================================================


class SubmittedJob(BaseModel):
    """
    Result of a submission.

    Attributes:
        job_id: Id to poll for status
        kind: What the job does
        filename: Blob name the job reads (import) or writes (export)
    """

    job_id: str
    kind: JobKind
    filename: str = Field(min_length=1)


def export_filename(kind: JobKind, owner_user_id: int, now: Optional[datetime] = None) -> str:
    """
    Build the blob name of an export file.

    Examples:
        >>> export_filename(JobKind.EXPORT_PROJECT, 7)  # doctest: +SKIP
        'projects_export_7_20250111T103045_1a2b3c4d.xlsx'
    """
    entity = "projects" if kind is JobKind.EXPORT_PROJECT else "tasks"
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%S")
    return f"{entity}_export_{owner_user_id}_{stamp}_{uuid4().hex[:8]}.xlsx"


# ============================================================================
# USE CASE
# ============================================================================


class JobSubmissionService:
    """
    Submits import and export jobs.

    Examples:
        >>> service = JobSubmissionService(storage, jobs, publisher)
        >>> with open("projects.xlsx", "rb") as f:
        ...     submitted = service.submit_project_import(f, "projects.xlsx", owner_user_id=7)
        >>> submitted.job_id
        '3fa85f64-5717-4562-b3fc-2c963f66afa6'
    """

    def __init__(
        self,
        storage: StorageClientProtocol,
        jobs: JobRepositoryProtocol,
        publisher: JobPublisherProtocol,
    ) -> None:
        self.storage = storage
        self.jobs = jobs
        self.publisher = publisher

    def submit_project_import(
        self, stream: BinaryIO, original_filename: str, owner_user_id: int
    ) -> SubmittedJob:
        return self._submit_import(
            JobKind.IMPORT_PROJECT, stream, original_filename, owner_user_id
        )

    def submit_task_import(
        self, stream: BinaryIO, original_filename: str, owner_user_id: int
    ) -> SubmittedJob:
        return self._submit_import(
            JobKind.IMPORT_TASK, stream, original_filename, owner_user_id
        )

    def submit_project_export(self, owner_user_id: int) -> SubmittedJob:
        return self._submit_export(JobKind.EXPORT_PROJECT, owner_user_id)

    def submit_task_export(self, owner_user_id: int, project_id: int) -> SubmittedJob:
        if project_id is None or project_id <= 0:
            raise ValueError(f"project_id must be a positive integer, got {project_id!r}")
        return self._submit_export(JobKind.EXPORT_TASK, owner_user_id, project_id)

    def _submit_import(
        self,
        kind: JobKind,
        stream: BinaryIO,
        original_filename: str,
        owner_user_id: int,
    ) -> SubmittedJob:
        """
        Process Flow:
            1. Validate owner and extension
            2. Generate a collision-free blob name
            3. Upload the file (StorageError propagates, no job is created)
            4. Create the PENDING job (the blob is deleted if this fails)
            5. Publish the descriptor (compensate on failure)
        """
        self._validate_owner(owner_user_id)
        filename = unique_filename(original_filename or "", default_stem=kind.wire_type)
        if not filename.endswith(ALLOWED_EXTENSIONS):
            raise ValueError(
                f"Unsupported file type: {original_filename!r}. "
                f"Allowed: {', '.join(ALLOWED_EXTENSIONS)}"
            )

        self.storage.upload(stream, filename)
        try:
            job_id = self.jobs.create_job(kind, owner_user_id, filename)
        except Exception as e:
            logger.error(f"Creating job for {filename} failed: {e}")
            self._discard_blob(filename)
            raise

        message = ImportJobMessage(
            job_id=UUID(job_id),
            filename=filename,
            type=kind.wire_type,
            user_id=owner_user_id,
        )
        self._publish(job_id, owner_user_id, message)
        return SubmittedJob(job_id=job_id, kind=kind, filename=filename)

    def _submit_export(
        self, kind: JobKind, owner_user_id: int, project_id: Optional[int] = None
    ) -> SubmittedJob:
        self._validate_owner(owner_user_id)
        filename = export_filename(kind, owner_user_id)
        job_id = self.jobs.create_job(kind, owner_user_id, filename)

        message = ExportJobMessage(
            job_id=UUID(job_id),
            filename=filename,
            type=kind.wire_type,
            user_id=owner_user_id,
            project_id=project_id,
        )
        self._publish(job_id, owner_user_id, message)
        return SubmittedJob(job_id=job_id, kind=kind, filename=filename)

    def _publish(
        self,
        job_id: str,
        owner_user_id: int,
        message: Union[ImportJobMessage, ExportJobMessage],
    ) -> None:
        try:
            self.publisher.publish(message)
        except Exception as e:
            logger.error(f"Publishing job {job_id} failed: {e}")
            try:
                self.jobs.update_status(
                    job_id, owner_user_id, JobStatus.FAILED, ENQUEUE_FAILED_MESSAGE
                )
            except Exception as compensation_error:
                logger.error(
                    f"Job {job_id} left pending, marking it failed also failed: "
                    f"{compensation_error}"
                )
            raise JobEnqueueError(job_id, original_error=e) from e

        logger.info(f"Job {job_id} ({message.type}) enqueued for user {owner_user_id}")

    def _discard_blob(self, filename: str) -> None:
        try:
            self.storage.delete(filename)
        except Exception as e:
            logger.warning(f"Orphaned upload {filename} could not be deleted: {e}")

    @staticmethod
    def _validate_owner(owner_user_id: int) -> None:
        if not isinstance(owner_user_id, int) or owner_user_id <= 0:
            raise ValueError(f"owner_user_id must be a positive integer, got {owner_user_id!r}")
