"""
Job Entity.

Persisted record describing one import/export request and its outcome.
The entity owns the status state machine; repositories only load, call the
transition methods and store the result, so every backend enforces the
same rules.

State machine:
    PENDING -> COMPLETED
    PENDING -> FAILED
    Terminal states are never left again.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from taskpilot_bulk.domain.shared.exceptions import JobStateTransitionError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    """
    Status of a bulk job.

    Attributes:
        PENDING: Job record created, descriptor queued or being processed
        COMPLETED: Pipeline finished successfully
        FAILED: Pipeline stopped with an error (error_message is set)
    """

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.PENDING


class JobKind(str, Enum):
    """
    What a job does and on which entity type.

    The wire message carries only the entity type ("project_excel" or
    "task_excel"); the queue it arrives on decides import vs export.
    """

    IMPORT_PROJECT = "import_project"
    IMPORT_TASK = "import_task"
    EXPORT_PROJECT = "export_project"
    EXPORT_TASK = "export_task"

    @property
    def is_import(self) -> bool:
        return self in (JobKind.IMPORT_PROJECT, JobKind.IMPORT_TASK)

    @property
    def wire_type(self) -> str:
        """Message `type` value for this kind."""
        if self in (JobKind.IMPORT_PROJECT, JobKind.EXPORT_PROJECT):
            return "project_excel"
        return "task_excel"

    @classmethod
    def from_wire(cls, wire_type: str, is_import: bool) -> "JobKind":
        """
        Resolve a job kind from a message type and the consuming queue.

        Raises:
            ValueError: If wire_type is not a known message type
        """
        mapping = {
            ("project_excel", True): cls.IMPORT_PROJECT,
            ("task_excel", True): cls.IMPORT_TASK,
            ("project_excel", False): cls.EXPORT_PROJECT,
            ("task_excel", False): cls.EXPORT_TASK,
        }
        try:
            return mapping[(wire_type, is_import)]
        except KeyError:
            raise ValueError(f"Unknown job message type: {wire_type!r}") from None


@dataclass
class Job:
    """
    Bulk import/export job.

    Created as PENDING by the submission service, mutated by the worker.
    error_message is set iff status is FAILED; result_url is set only when an
    export produced a downloadable file.

    Examples:
        >>> job = Job(owner_user_id=7, kind=JobKind.IMPORT_PROJECT, filename="p_1a2b3c4d.xlsx")
        >>> job.status
        <JobStatus.PENDING: 'pending'>
        >>> job.mark_failed("Missing required headers: color")
        >>> job.mark_completed()  # raises JobStateTransitionError
    """

    owner_user_id: int
    kind: JobKind
    filename: str
    status: JobStatus = JobStatus.PENDING
    error_message: Optional[str] = None
    result_url: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def _ensure_pending(self, requested: JobStatus) -> None:
        if self.status.is_terminal:
            raise JobStateTransitionError(
                job_id=self.id,
                current_status=self.status.value,
                requested_status=requested.value,
            )

    def mark_completed(self) -> None:
        """
        Move the job to COMPLETED.

        Raises:
            JobStateTransitionError: If the job is already terminal
        """
        self._ensure_pending(JobStatus.COMPLETED)
        self.status = JobStatus.COMPLETED
        self.error_message = None
        self.updated_at = _utcnow()

    def mark_failed(self, error_message: str) -> None:
        """
        Move the job to FAILED with the given error message.

        Raises:
            JobStateTransitionError: If the job is already terminal
        """
        self._ensure_pending(JobStatus.FAILED)
        self.status = JobStatus.FAILED
        self.error_message = error_message or "unknown error"
        self.updated_at = _utcnow()

    def apply_status(self, status: JobStatus, error_message: Optional[str] = None) -> None:
        """
        Apply a requested status through the matching transition method.

        Re-applying PENDING to a pending job is a no-op; any change of a
        terminal job raises.
        """
        if status is JobStatus.COMPLETED:
            self.mark_completed()
        elif status is JobStatus.FAILED:
            self.mark_failed(error_message or "unknown error")
        else:
            self._ensure_pending(status)

    def attach_result_url(self, url: str) -> None:
        """
        Store the download link of a finished export.

        Raises:
            JobStateTransitionError: If the job is already terminal
            ValueError: If url is empty
        """
        if not url:
            raise ValueError("result url cannot be empty")
        self._ensure_pending(self.status)
        self.result_url = url
        self.updated_at = _utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "owner_user_id": self.owner_user_id,
            "kind": self.kind.value,
            "status": self.status.value,
            "filename": self.filename,
            "error_message": self.error_message,
            "result_url": self.result_url,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Rebuild a Job from to_dict() output."""
        return cls(
            id=data["id"],
            owner_user_id=int(data["owner_user_id"]),
            kind=JobKind(data["kind"]),
            status=JobStatus(data["status"]),
            filename=data.get("filename", ""),
            error_message=data.get("error_message"),
            result_url=data.get("result_url"),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
