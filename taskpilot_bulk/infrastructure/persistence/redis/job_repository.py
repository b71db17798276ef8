"""
Redis Job Repository

Stores bulk Job records in Redis for status polling by clients and terminal
updates by the worker. Implements JobRepositoryProtocol.

Storage Format:
    Redis key "job:{job_id}" -> JSON dict produced by Job.to_dict():
    {
        "id": "3fa85f64-...",
        "owner_user_id": 7,
        "kind": "import_project",
        "status": "pending",             # pending/completed/failed
        "filename": "projects_1a2b3c4d.xlsx",
        "error_message": null,           # set iff failed
        "result_url": null,              # set when an export finished
        "created_at": "2025-01-11T10:30:45.123+00:00",
        "updated_at": "2025-01-11T10:30:45.123+00:00"
    }

Business Rules:
    - TTL: JOB_TTL_SECONDS, refreshed on every write
    - Ownership: a record whose owner differs from the caller is reported
      as not found
    - Monotonic status: updates run as WATCH/MULTI/EXEC read-modify-write,
      the Job entity rejects transitions out of a terminal state, so two
      racing terminal updates cannot both win

Error Handling:
    - RedisError propagates; the worker turns it into a failed job
    - WatchError (concurrent write) retries the transaction
"""

import json
import logging
from typing import Callable, Optional

from redis import Redis
from redis.exceptions import WatchError

from taskpilot_bulk.domain.shared.exceptions import JobNotFoundError
from taskpilot_bulk.domain.tracker.entities.job import Job, JobKind, JobStatus

logger = logging.getLogger(__name__)


class RedisJobRepository:
    """
    Job persistence backed by Redis.

    Examples:
        >>> repo = RedisJobRepository(get_redis_client(), ttl_seconds=86400)
        >>> job_id = repo.create_job(JobKind.IMPORT_PROJECT, 7, "projects_1a2b3c4d.xlsx")
        >>> repo.update_status(job_id, 7, JobStatus.COMPLETED)
        >>> repo.get_status(job_id, 7).status
        <JobStatus.COMPLETED: 'completed'>
    """

    MAX_WATCH_RETRIES = 10

    def __init__(self, redis_client: Redis, ttl_seconds: int = 7 * 24 * 3600) -> None:
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def _get_job_key(self, job_id: str) -> str:
        """
        Generate Redis key for a job record.

        Examples:
            >>> repo._get_job_key("abc-123")
            'job:abc-123'
        """
        return f"job:{job_id}"

    def _decode(self, job_id: str, owner_user_id: int, raw: Optional[str]) -> Job:
        if not raw:
            raise JobNotFoundError(job_id)
        job = Job.from_dict(json.loads(raw))
        if job.owner_user_id != owner_user_id:
            logger.warning(
                f"Job {job_id} requested by user {owner_user_id}, "
                f"owned by {job.owner_user_id}"
            )
            raise JobNotFoundError(job_id)
        return job

    def create_job(self, kind: JobKind, owner_user_id: int, filename: str) -> str:
        """
        Store a new PENDING job.

        Returns:
            Generated job id
        """
        job = Job(owner_user_id=owner_user_id, kind=kind, filename=filename)
        self.redis.setex(
            self._get_job_key(job.id), self.ttl_seconds, json.dumps(job.to_dict())
        )
        logger.info(f"Job {job.id} created ({kind.value}, user {owner_user_id}, {filename})")
        return job.id

    def get_status(self, job_id: str, owner_user_id: int) -> Job:
        """
        Load a job owned by owner_user_id.

        Raises:
            JobNotFoundError: If the job is unknown, expired or foreign
        """
        raw = self.redis.get(self._get_job_key(job_id))
        return self._decode(job_id, owner_user_id, raw)

    def update_status(
        self,
        job_id: str,
        owner_user_id: int,
        status: JobStatus,
        error_message: Optional[str] = None,
    ) -> Job:
        """
        Move a job to a new status.

        Raises:
            JobNotFoundError: If the job is unknown or foreign
            JobStateTransitionError: If the job is already terminal
        """
        job = self._mutate(
            job_id, owner_user_id, lambda j: j.apply_status(status, error_message)
        )
        if job.status is JobStatus.FAILED:
            logger.error(f"Job {job_id} marked as failed: {job.error_message}")
        else:
            logger.info(f"Job {job_id} status -> {job.status.value}")
        return job

    def set_result_url(self, job_id: str, owner_user_id: int, url: str) -> Job:
        """
        Store the download link of a finished export.

        Raises:
            JobNotFoundError: If the job is unknown or foreign
            JobStateTransitionError: If the job is already terminal
        """
        job = self._mutate(job_id, owner_user_id, lambda j: j.attach_result_url(url))
        logger.info(f"Job {job_id} result url stored")
        return job

    def _mutate(
        self, job_id: str, owner_user_id: int, change: Callable[[Job], None]
    ) -> Job:
        """Optimistic read-modify-write of one job record."""
        key = self._get_job_key(job_id)

        with self.redis.pipeline() as pipe:
            for attempt in range(self.MAX_WATCH_RETRIES):
                try:
                    pipe.watch(key)
                    job = self._decode(job_id, owner_user_id, pipe.get(key))
                    change(job)

                    pipe.multi()
                    pipe.setex(key, self.ttl_seconds, json.dumps(job.to_dict()))
                    pipe.execute()
                    return job

                except WatchError:
                    logger.debug(
                        f"Concurrent write on job {job_id}, retrying "
                        f"({attempt + 1}/{self.MAX_WATCH_RETRIES})"
                    )

        raise WatchError(
            f"Job {job_id} kept changing during update after "
            f"{self.MAX_WATCH_RETRIES} attempts"
        )
