"""
Row Handlers and Row Projections

Glue between spreadsheet Records and the tracker's data-access service.

Import side:
    - ProjectRowHandler: one "name, description, color" row -> create_project()
    - TaskRowHandler: one task row -> resolve assignee, parse ids/dates,
      create_task()

Export side:
    - project_to_row / task_to_row: entity -> list of cell values in the
      exporter's header order (id, <columns>, created_at, updated_at)

Every rejection raises InvalidRowError with a message meant for the user;
the importer prefixes it with the Excel row number.
"""

from datetime import datetime, timezone
from typing import Any

from taskpilot_bulk.application.ports.data_access import (
    ProjectDataServiceProtocol,
    TaskDataServiceProtocol,
    UserDirectoryProtocol,
)
from taskpilot_bulk.domain.shared.exceptions import DomainException
from taskpilot_bulk.domain.tracker.entities.records import Project, Task


class InvalidRowError(DomainException):
    """Raised when a Record carries a value the domain cannot accept."""


def parse_positive_int(value: str, field: str) -> int:
    """
    Parse an integer id cell.

    Raises:
        InvalidRowError: If value is empty, not an integer or not positive
    """
    text = (value or "").strip()
    if not text:
        raise InvalidRowError(f"{field} is required")
    try:
        number = int(text)
    except ValueError:
        raise InvalidRowError(f"{field} must be an integer, got {text!r}") from None
    if number <= 0:
        raise InvalidRowError(f"{field} must be positive, got {number}")
    return number


def parse_due_date(value: str) -> datetime:
    """
    Parse an ISO-8601 / RFC 3339 timestamp.

    A trailing "Z" means UTC. Dates without a time part are midnight UTC;
    naive timestamps are taken as UTC.

    Raises:
        InvalidRowError: If value is empty or not a valid timestamp

    Examples:
        >>> parse_due_date("2025-03-01T12:00:00Z")
        datetime.datetime(2025, 3, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    text = (value or "").strip()
    if not text:
        raise InvalidRowError("due_date is required")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidRowError(
            f"due_date must be an ISO-8601 timestamp, got {value!r}"
        ) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ProjectRowHandler:
    """Creates one project per imported row."""

    def __init__(self, projects: ProjectDataServiceProtocol) -> None:
        self.projects = projects

    def __call__(self, record: dict[str, str], owner_id: int) -> None:
        name = record.get("name", "").strip()
        if not name:
            raise InvalidRowError("name is required")

        self.projects.create_project(
            owner_id,
            name,
            record.get("description", ""),
            record.get("color", ""),
        )


class TaskRowHandler:
    """
    Creates one task per imported row.

    The assignee is given by e-mail in the file and stored by user id.
    """

    def __init__(
        self, tasks: TaskDataServiceProtocol, users: UserDirectoryProtocol
    ) -> None:
        self.tasks = tasks
        self.users = users

    def __call__(self, record: dict[str, str], owner_id: int) -> None:
        project_id = parse_positive_int(record.get("project_id", ""), "project_id")

        title = record.get("title", "").strip()
        if not title:
            raise InvalidRowError("title is required")

        email = record.get("assignee_email", "").strip()
        if not email:
            raise InvalidRowError("assignee_email is required")
        assignee = self.users.get_user_by_email(email)
        if assignee is None:
            raise InvalidRowError(f"Unknown assignee email: {email}")

        due_date = parse_due_date(record.get("due_date", ""))

        self.tasks.create_task(
            project_id,
            title,
            assignee.id,
            record.get("description", ""),
            record.get("status", ""),
            record.get("priority", ""),
            due_date,
        )


def project_to_row(project: Project) -> list[Any]:
    return [
        project.id,
        project.name,
        project.description,
        project.color,
        project.created_at,
        project.updated_at,
    ]


def task_to_row(task: Task) -> list[Any]:
    return [
        task.id,
        task.project_id,
        task.title,
        task.assignee_id,
        task.description,
        task.status,
        task.priority,
        task.due_date,
        task.created_at,
        task.updated_at,
    ]
