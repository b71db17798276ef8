"""
Tracker Subdomain - bulk jobs over projects and tasks.

Exports:
    - Job, JobKind, JobStatus: job entity and its state machine
    - Project, Task, User: read-side views returned by the data-access service
"""

from .entities import Job, JobKind, JobStatus, Project, Task, User

__all__ = ["Job", "JobKind", "JobStatus", "Project", "Task", "User"]
