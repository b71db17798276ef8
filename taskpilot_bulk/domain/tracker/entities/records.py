"""
Tracker entities as seen by the bulk subsystem.

Read-side views of the rows owned by the tracker's relational layer. The
data-access service returns these from its list_* and lookup methods; the
bulk subsystem never writes them directly.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    id: int
    email: str


@dataclass(frozen=True)
class Project:
    """Project owned by one user."""

    id: int
    owner_id: int
    name: str
    description: str = ""
    color: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Task:
    """Task inside a project, optionally assigned to a user."""

    id: int
    project_id: int
    title: str
    assignee_id: Optional[int] = None
    description: str = ""
    status: str = ""
    priority: str = ""
    due_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
