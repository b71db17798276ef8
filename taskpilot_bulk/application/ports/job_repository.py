"""
Job Repository Port

Persistence interface for Job records, keyed by job id + owner. Implemented
by RedisJobRepository (production) and InMemoryJobRepository (tests and
single-process runs).

Business Rules (all implementations):
    - create_job() stores a new PENDING job and returns its id
    - every lookup/update is scoped to the owner; a foreign or unknown id
      raises JobNotFoundError
    - status is monotonic: updating a terminal job raises
      JobStateTransitionError and leaves the record unchanged
    - set_result_url() is only valid while the job is PENDING
"""

from typing import Optional, Protocol, runtime_checkable

from taskpilot_bulk.domain.tracker.entities.job import Job, JobKind, JobStatus


@runtime_checkable
class JobRepositoryProtocol(Protocol):
    def create_job(self, kind: JobKind, owner_user_id: int, filename: str) -> str: ...

    def update_status(
        self,
        job_id: str,
        owner_user_id: int,
        status: JobStatus,
        error_message: Optional[str] = None,
    ) -> Job: ...

    def set_result_url(self, job_id: str, owner_user_id: int, url: str) -> Job: ...

    def get_status(self, job_id: str, owner_user_id: int) -> Job: ...
