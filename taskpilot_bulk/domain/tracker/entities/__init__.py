"""Tracker entities: Job (state machine) and read-side Project/Task/User views."""

from .job import Job, JobKind, JobStatus
from .records import Project, Task, User

__all__ = ["Job", "JobKind", "JobStatus", "Project", "Task", "User"]
