"""
GetJobStatusQuery - CQRS Read Query

Query object and handler for retrieving a bulk job's status.
Part of CQRS pattern - separates read operations from write operations.

Responsibility:
    - Query: Data holder with job_id and the requesting user
    - Handler: Loads the job from the repository and maps it to a DTO

Architecture Notes:
    - Part of Application Layer (orchestration)
    - Query is simple DTO (Data Transfer Object)
    - Handler delegates to JobRepositoryProtocol
"""

import logging
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from taskpilot_bulk.application.models import JobKind, JobStatus
from taskpilot_bulk.application.ports.job_repository import JobRepositoryProtocol

logger = logging.getLogger(__name__)


class GetJobStatusQuery(BaseModel):
    """
    Query object containing job ID to retrieve status for.

    Attributes:
        job_id: Id returned at submission
        owner_user_id: User asking; only the job owner can see it
    """

    job_id: UUID = Field(description="Job id returned by the submission service")
    owner_user_id: int = Field(gt=0)


class JobStatusResult(BaseModel):
    """
    Result DTO returned by GetJobStatusQueryHandler.

    Attributes:
        job_id: Job id
        kind: import_project / import_task / export_project / export_task
        status: pending / completed / failed
        filename: Blob name of the job
        result_ready: True when an export's download link is available
        result_url: Signed download link (exports only)
        error_message: Failure description (failed jobs only)
        created_at / updated_at: ISO timestamps
    """

    job_id: UUID
    kind: JobKind
    status: JobStatus
    filename: str
    result_ready: bool = False
    result_url: Optional[str] = None
    error_message: Optional[str] = None
    created_at: str
    updated_at: str


class GetJobStatusQueryHandler:
    """
    Handler for retrieving job status.

    Usage:
        handler = GetJobStatusQueryHandler(job_repository)
        result = handler.handle(GetJobStatusQuery(job_id=..., owner_user_id=7))
    """

    def __init__(self, jobs: JobRepositoryProtocol) -> None:
        self.jobs = jobs

    def handle(self, query: GetJobStatusQuery) -> JobStatusResult:
        """
        Retrieve job status.

        Raises:
            JobNotFoundError: If the job is unknown, expired or owned by another user
        """
        job_id = str(query.job_id)
        logger.debug(f"Retrieving status for job: {job_id}")

        job = self.jobs.get_status(job_id, query.owner_user_id)

        return JobStatusResult(
            job_id=query.job_id,
            kind=job.kind,
            status=job.status,
            filename=job.filename,
            result_ready=bool(job.result_url),
            result_url=job.result_url,
            error_message=job.error_message,
            created_at=job.created_at.isoformat(),
            updated_at=job.updated_at.isoformat(),
        )
