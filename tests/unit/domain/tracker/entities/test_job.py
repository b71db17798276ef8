"""
Tests for Job entity.

Covers:
- Status state machine (pending -> completed/failed, never back)
- Result URL attachment rules
- JobKind wire mapping
- Serialization round trip used by the Redis repository
"""

import pytest

from taskpilot_bulk.domain.shared.exceptions import JobStateTransitionError
from taskpilot_bulk.domain.tracker.entities.job import Job, JobKind, JobStatus


@pytest.fixture
def job():
    return Job(owner_user_id=7, kind=JobKind.IMPORT_PROJECT, filename="projects_1a2b3c4d.xlsx")


# ============================================================================
# HAPPY PATH TESTS
# ============================================================================


def test_new_job_is_pending(job):
    assert job.status is JobStatus.PENDING
    assert job.error_message is None
    assert job.result_url is None
    assert not job.is_terminal
    assert job.id


def test_mark_completed(job):
    job.mark_completed()

    assert job.status is JobStatus.COMPLETED
    assert job.is_terminal
    assert job.updated_at >= job.created_at


def test_mark_failed_stores_message(job):
    job.mark_failed("Import failed: Missing required headers: color")

    assert job.status is JobStatus.FAILED
    assert job.error_message == "Import failed: Missing required headers: color"


def test_apply_status_pending_on_pending_is_noop(job):
    job.apply_status(JobStatus.PENDING)
    assert job.status is JobStatus.PENDING


def test_attach_result_url_keeps_job_pending(job):
    job.attach_result_url("https://bucket.example.com/x.xlsx?sig=abc")

    assert job.result_url == "https://bucket.example.com/x.xlsx?sig=abc"
    assert job.status is JobStatus.PENDING


def test_to_dict_from_dict_preserves_fields(job):
    job.mark_failed("boom")

    restored = Job.from_dict(job.to_dict())

    assert restored == job


# ============================================================================
# STATE MACHINE TESTS
# ============================================================================


@pytest.mark.parametrize(
    "first,second",
    [
        (JobStatus.COMPLETED, JobStatus.FAILED),
        (JobStatus.FAILED, JobStatus.COMPLETED),
        (JobStatus.COMPLETED, JobStatus.COMPLETED),
        (JobStatus.FAILED, JobStatus.PENDING),
    ],
)
def test_terminal_status_is_never_left(job, first, second):
    job.apply_status(first, "error" if first is JobStatus.FAILED else None)

    with pytest.raises(JobStateTransitionError) as exc_info:
        job.apply_status(second, "again")

    assert job.status is first
    assert exc_info.value.current_status == first.value
    assert exc_info.value.requested_status == second.value


def test_attach_result_url_on_terminal_job_raises(job):
    job.mark_completed()

    with pytest.raises(JobStateTransitionError):
        job.attach_result_url("https://example.com/file.xlsx")
    assert job.result_url is None


def test_attach_empty_result_url_raises(job):
    with pytest.raises(ValueError):
        job.attach_result_url("")


# ============================================================================
# JOB KIND TESTS
# ============================================================================


@pytest.mark.parametrize(
    "wire_type,is_import,expected",
    [
        ("project_excel", True, JobKind.IMPORT_PROJECT),
        ("task_excel", True, JobKind.IMPORT_TASK),
        ("project_excel", False, JobKind.EXPORT_PROJECT),
        ("task_excel", False, JobKind.EXPORT_TASK),
    ],
)
def test_kind_from_wire(wire_type, is_import, expected):
    kind = JobKind.from_wire(wire_type, is_import)

    assert kind is expected
    assert kind.is_import is is_import
    assert kind.wire_type == wire_type


def test_kind_from_unknown_wire_type_raises():
    with pytest.raises(ValueError, match="user_excel"):
        JobKind.from_wire("user_excel", True)
