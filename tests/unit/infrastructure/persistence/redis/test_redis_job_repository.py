"""
Tests for RedisJobRepository.

Covers:
- Key format and TTL on create
- Ownership checks on read and update
- WATCH/MULTI/EXEC updates, retries on WatchError
- Terminal status is never overwritten
"""

import json
from unittest.mock import MagicMock

import pytest
from redis.exceptions import WatchError

from taskpilot_bulk.domain.shared.exceptions import JobNotFoundError, JobStateTransitionError
from taskpilot_bulk.domain.tracker.entities.job import Job, JobKind, JobStatus
from taskpilot_bulk.infrastructure.persistence.redis.job_repository import RedisJobRepository

TTL = 3600


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def mock_redis():
    return MagicMock()


@pytest.fixture
def pipe(mock_redis):
    pipe = MagicMock()
    mock_redis.pipeline.return_value.__enter__.return_value = pipe
    return pipe


@pytest.fixture
def repo(mock_redis):
    return RedisJobRepository(mock_redis, ttl_seconds=TTL)


@pytest.fixture
def stored_job():
    return Job(owner_user_id=7, kind=JobKind.EXPORT_PROJECT, filename="projects_export.xlsx")


def written_job(pipe) -> Job:
    key, ttl, raw = pipe.setex.call_args[0]
    assert ttl == TTL
    return Job.from_dict(json.loads(raw))


# ============================================================================
# CREATE / GET TESTS
# ============================================================================


def test_create_job_stores_pending_record_with_ttl(repo, mock_redis):
    job_id = repo.create_job(JobKind.IMPORT_PROJECT, 7, "projects_1a2b3c4d.xlsx")

    key, ttl, raw = mock_redis.setex.call_args[0]
    data = json.loads(raw)
    assert key == f"job:{job_id}"
    assert ttl == TTL
    assert data["status"] == "pending"
    assert data["kind"] == "import_project"
    assert data["owner_user_id"] == 7
    assert data["error_message"] is None


def test_get_status_returns_job(repo, mock_redis, stored_job):
    mock_redis.get.return_value = json.dumps(stored_job.to_dict())

    job = repo.get_status(stored_job.id, 7)

    assert job == stored_job
    mock_redis.get.assert_called_once_with(f"job:{stored_job.id}")


def test_get_status_unknown_job_raises(repo, mock_redis):
    mock_redis.get.return_value = None

    with pytest.raises(JobNotFoundError):
        repo.get_status("missing", 7)


def test_get_status_foreign_owner_raises(repo, mock_redis, stored_job):
    mock_redis.get.return_value = json.dumps(stored_job.to_dict())

    with pytest.raises(JobNotFoundError):
        repo.get_status(stored_job.id, 8)


# ============================================================================
# UPDATE TESTS
# ============================================================================


def test_update_status_completed(repo, pipe, stored_job):
    pipe.get.return_value = json.dumps(stored_job.to_dict())

    job = repo.update_status(stored_job.id, 7, JobStatus.COMPLETED)

    assert job.status is JobStatus.COMPLETED
    pipe.watch.assert_called_once_with(f"job:{stored_job.id}")
    pipe.multi.assert_called_once()
    pipe.execute.assert_called_once()
    assert written_job(pipe).status is JobStatus.COMPLETED


def test_update_status_failed_stores_message(repo, pipe, stored_job):
    pipe.get.return_value = json.dumps(stored_job.to_dict())

    repo.update_status(stored_job.id, 7, JobStatus.FAILED, "Import failed: Row 3: name is required")

    written = written_job(pipe)
    assert written.status is JobStatus.FAILED
    assert written.error_message == "Import failed: Row 3: name is required"


def test_update_terminal_job_is_rejected_without_write(repo, pipe, stored_job):
    stored_job.mark_completed()
    pipe.get.return_value = json.dumps(stored_job.to_dict())

    with pytest.raises(JobStateTransitionError):
        repo.update_status(stored_job.id, 7, JobStatus.FAILED, "late failure")

    pipe.setex.assert_not_called()
    pipe.execute.assert_not_called()


def test_update_foreign_job_raises(repo, pipe, stored_job):
    pipe.get.return_value = json.dumps(stored_job.to_dict())

    with pytest.raises(JobNotFoundError):
        repo.update_status(stored_job.id, 99, JobStatus.COMPLETED)
    pipe.execute.assert_not_called()


def test_update_retries_on_watch_error(repo, pipe, stored_job):
    pipe.get.return_value = json.dumps(stored_job.to_dict())
    pipe.execute.side_effect = [WatchError("changed"), None]

    job = repo.update_status(stored_job.id, 7, JobStatus.COMPLETED)

    assert job.status is JobStatus.COMPLETED
    assert pipe.execute.call_count == 2
    assert pipe.watch.call_count == 2


def test_update_gives_up_after_max_retries(repo, pipe, stored_job):
    pipe.get.return_value = json.dumps(stored_job.to_dict())
    pipe.execute.side_effect = WatchError("changed")

    with pytest.raises(WatchError):
        repo.update_status(stored_job.id, 7, JobStatus.COMPLETED)

    assert pipe.execute.call_count == RedisJobRepository.MAX_WATCH_RETRIES


def test_set_result_url_keeps_pending(repo, pipe, stored_job):
    pipe.get.return_value = json.dumps(stored_job.to_dict())

    job = repo.set_result_url(stored_job.id, 7, "https://s3.example.com/x.xlsx?sig=1")

    assert job.status is JobStatus.PENDING
    assert written_job(pipe).result_url == "https://s3.example.com/x.xlsx?sig=1"
