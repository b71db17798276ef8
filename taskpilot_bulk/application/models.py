"""
Shared Application Models

Responsibility:
    Contains the queue message models and small enums shared by the
    submission service, the publisher, the worker and the Celery tasks.
    Prevents circular dependencies and code duplication.

Architecture Notes:
    - Part of Application Layer (Shared)
    - Message models are the wire contract of the job queues (JSON)
    - JobStatus/JobKind live in the Domain Layer and are re-exported here

Contains:
    - ImportJobMessage / ExportJobMessage: queue payloads
    - JobOutcome: acknowledgement decision for one delivery

Wire format (JSON, one object per message):
    ImportJobMessage { job_id, filename, type, user_id }
    ExportJobMessage { job_id, filename, type, user_id, project_id? }
"""

from enum import Enum
from typing import Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from taskpilot_bulk.domain.shared.exceptions import InvalidJobMessageError, StorageError
from taskpilot_bulk.domain.tracker.entities.job import JobKind, JobStatus
from taskpilot_bulk.shared.utils.filenames import validate_blob_name

WireType = Literal["project_excel", "task_excel"]


class JobOutcome(str, Enum):
    """
    Acknowledgement decision for one queue delivery.

    Attributes:
        ACK: Pipeline succeeded, message is removed from the queue
        NACK: Pipeline failed or payload was malformed, message is dropped
            without requeue (single attempt)
    """

    ACK = "ack"
    NACK = "nack"


class _JobMessage(BaseModel):
    """Fields common to import and export descriptors."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    job_id: UUID = Field(description="Id of the Job record this message refers to")
    filename: str = Field(min_length=1, description="Blob name in storage")
    type: WireType = Field(description="Entity type of the spreadsheet")
    user_id: int = Field(gt=0, description="Owner of the job")

    @field_validator("filename")
    @classmethod
    def _plain_blob_name(cls, value: str) -> str:
        try:
            return validate_blob_name(value)
        except StorageError as e:
            raise ValueError(f"filename must be a bare blob name, got {value!r}") from e

    @classmethod
    def from_payload(cls, payload: Union[dict, str, bytes, Any]):
        """
        Deserialize a queue payload, raising a protocol error on any mismatch.

        Args:
            payload: Decoded dict, or raw JSON text/bytes

        Returns:
            Validated message instance

        Raises:
            InvalidJobMessageError: If the payload is not a valid message
        """
        try:
            if isinstance(payload, (str, bytes, bytearray)):
                return cls.model_validate_json(payload)
            return cls.model_validate(payload)
        except ValidationError as e:
            raise InvalidJobMessageError(
                f"Invalid {cls.__name__} payload: {e.error_count()} validation error(s): "
                + "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                    for err in e.errors()
                ),
                payload=payload,
            ) from e

    def to_payload(self) -> dict:
        """JSON-compatible dict, as published on the queue."""
        return self.model_dump(mode="json", exclude_none=True)


class ImportJobMessage(_JobMessage):
    """
    Descriptor of an import job.

    Examples:
        >>> msg = ImportJobMessage.from_payload(
        ...     {"job_id": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
        ...      "filename": "projects_1a2b3c4d.xlsx",
        ...      "type": "project_excel", "user_id": 7}
        ... )
        >>> msg.kind
        <JobKind.IMPORT_PROJECT: 'import_project'>
    """

    @property
    def kind(self) -> JobKind:
        return JobKind.from_wire(self.type, is_import=True)


class ExportJobMessage(_JobMessage):
    """
    Descriptor of an export job.

    Task exports are scoped to one project, so project_id is required when
    type is "task_excel" and ignored otherwise.
    """

    project_id: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _require_project_for_tasks(self) -> "ExportJobMessage":
        if self.type == "task_excel" and self.project_id is None:
            raise ValueError("project_id is required for task exports")
        return self

    @property
    def kind(self) -> JobKind:
        return JobKind.from_wire(self.type, is_import=False)


__all__ = [
    "ExportJobMessage",
    "ImportJobMessage",
    "JobKind",
    "JobOutcome",
    "JobStatus",
]
