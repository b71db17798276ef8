"""
Data-Access Ports

Interfaces of the tracker's relational layer as consumed by the bulk
subsystem. The layer itself lives outside this repository; the worker gets
an implementation from the DATA_SERVICE_FACTORY setting.

Errors raised by implementations (duplicate project, unknown project id,
unknown user) propagate to the importer, which reports them as the failing
row's error.
"""

from datetime import datetime
from typing import Optional, Protocol, Sequence, runtime_checkable

from taskpilot_bulk.domain.tracker.entities.records import Project, Task, User


@runtime_checkable
class ProjectDataServiceProtocol(Protocol):
    def create_project(
        self, owner_id: int, name: str, description: str, color: str
    ) -> Project: ...

    def list_projects_by_owner(self, owner_id: int) -> Sequence[Project]: ...


@runtime_checkable
class TaskDataServiceProtocol(Protocol):
    def create_task(
        self,
        project_id: int,
        title: str,
        assignee_id: int,
        description: str,
        status: str,
        priority: str,
        due_date: datetime,
    ) -> Task: ...

    def list_tasks_by_project(self, project_id: int) -> Sequence[Task]: ...


@runtime_checkable
class UserDirectoryProtocol(Protocol):
    def get_user_by_email(self, email: str) -> Optional[User]:
        """Return the user with this e-mail, or None if there is none."""
        ...


@runtime_checkable
class TrackerDataServiceProtocol(
    ProjectDataServiceProtocol,
    TaskDataServiceProtocol,
    UserDirectoryProtocol,
    Protocol,
):
    """Everything the worker needs from the data-access layer."""
