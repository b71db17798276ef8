"""
In-memory Job Repository.

Dict-backed JobRepositoryProtocol implementation for tests and
single-process runs. Records live only as long as the process.
"""

import copy
import logging
import threading
from typing import Optional

from taskpilot_bulk.domain.shared.exceptions import JobNotFoundError
from taskpilot_bulk.domain.tracker.entities.job import Job, JobKind, JobStatus

logger = logging.getLogger(__name__)


class InMemoryJobRepository:
    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()

    def _get_owned(self, job_id: str, owner_user_id: int) -> Job:
        job = self._jobs.get(job_id)
        if job is None or job.owner_user_id != owner_user_id:
            raise JobNotFoundError(job_id)
        return job

    def create_job(self, kind: JobKind, owner_user_id: int, filename: str) -> str:
        job = Job(owner_user_id=owner_user_id, kind=kind, filename=filename)
        with self._lock:
            self._jobs[job.id] = job
        logger.info(f"Job {job.id} created ({kind.value}, user {owner_user_id})")
        return job.id

    def get_status(self, job_id: str, owner_user_id: int) -> Job:
        with self._lock:
            # Copies keep callers from mutating stored state
            return copy.deepcopy(self._get_owned(job_id, owner_user_id))

    def update_status(
        self,
        job_id: str,
        owner_user_id: int,
        status: JobStatus,
        error_message: Optional[str] = None,
    ) -> Job:
        with self._lock:
            job = self._get_owned(job_id, owner_user_id)
            job.apply_status(status, error_message)
            logger.info(f"Job {job_id} status -> {job.status.value}")
            return copy.deepcopy(job)

    def set_result_url(self, job_id: str, owner_user_id: int, url: str) -> Job:
        with self._lock:
            job = self._get_owned(job_id, owner_user_id)
            job.attach_result_url(url)
            return copy.deepcopy(job)

    def __len__(self) -> int:
        return len(self._jobs)
