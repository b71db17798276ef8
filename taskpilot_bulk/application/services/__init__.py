"""
Application Services (Use Cases)

Exports:
    - JobSubmissionService: upload + create job + publish
    - BulkJobWorker: import/export pipelines run for each queue delivery
"""

from .job_submission_service import JobSubmissionService, SubmittedJob
from .job_worker import BulkJobWorker

__all__ = ["BulkJobWorker", "JobSubmissionService", "SubmittedJob"]
