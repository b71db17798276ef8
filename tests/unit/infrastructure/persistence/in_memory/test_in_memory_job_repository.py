"""Tests for InMemoryJobRepository."""

import threading

import pytest

from taskpilot_bulk.domain.shared.exceptions import JobNotFoundError, JobStateTransitionError
from taskpilot_bulk.domain.tracker.entities.job import JobKind, JobStatus


@pytest.fixture
def job_id(job_repository):
    return job_repository.create_job(JobKind.IMPORT_TASK, 7, "tasks_1a2b3c4d.xlsx")


def test_create_and_get(job_repository, job_id):
    job = job_repository.get_status(job_id, 7)

    assert job.status is JobStatus.PENDING
    assert job.kind is JobKind.IMPORT_TASK
    assert len(job_repository) == 1


def test_returned_job_is_a_copy(job_repository, job_id):
    job_repository.get_status(job_id, 7).mark_completed()

    assert job_repository.get_status(job_id, 7).status is JobStatus.PENDING


def test_foreign_owner_cannot_read(job_repository, job_id):
    with pytest.raises(JobNotFoundError):
        job_repository.get_status(job_id, 8)


def test_terminal_status_is_final(job_repository, job_id):
    job_repository.update_status(job_id, 7, JobStatus.FAILED, "Download failed: Blob not found")

    with pytest.raises(JobStateTransitionError):
        job_repository.update_status(job_id, 7, JobStatus.COMPLETED)

    job = job_repository.get_status(job_id, 7)
    assert job.status is JobStatus.FAILED
    assert job.error_message == "Download failed: Blob not found"


def test_racing_terminal_updates_have_one_winner(job_repository, job_id):
    results = []
    barrier = threading.Barrier(8)

    def update(status):
        barrier.wait()
        try:
            job_repository.update_status(job_id, 7, status, "failed")
            results.append(status)
        except JobStateTransitionError:
            pass

    threads = [
        threading.Thread(target=update, args=(JobStatus.COMPLETED if i % 2 else JobStatus.FAILED,))
        for i in range(8)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 1
    assert job_repository.get_status(job_id, 7).status is results[0]
