"""
Domain Layer - Core Business Logic

Framework-independent entities and errors of the bulk import/export
subsystem.

Architecture:
    - Clean Architecture: Domain Layer is the center, no external dependencies
    - Dependency Inversion: Application Layer defines ports, Infrastructure
      implements them

Subdomains:
    - tracker: Job state machine, project/task/user views, file layouts
    - shared: Exception hierarchy

Usage:
    >>> from taskpilot_bulk.domain import Job, JobKind, DomainException
"""

from .shared import DomainException
from .tracker import Job, JobKind, JobStatus, Project, Task, User

__all__ = [
    "DomainException",
    "Job",
    "JobKind",
    "JobStatus",
    "Project",
    "Task",
    "User",
]
