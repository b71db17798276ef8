"""
Application Layer Ports (Interfaces)

Contains Protocol definitions for dependency inversion.
Infrastructure Layer implements these protocols.
"""

from taskpilot_bulk.application.ports.data_access import (
    ProjectDataServiceProtocol,
    TaskDataServiceProtocol,
    TrackerDataServiceProtocol,
    UserDirectoryProtocol,
)
from taskpilot_bulk.application.ports.job_repository import JobRepositoryProtocol
from taskpilot_bulk.application.ports.publisher import JobPublisherProtocol
from taskpilot_bulk.application.ports.storage import StorageClientProtocol

__all__ = [
    "JobPublisherProtocol",
    "JobRepositoryProtocol",
    "ProjectDataServiceProtocol",
    "StorageClientProtocol",
    "TaskDataServiceProtocol",
    "TrackerDataServiceProtocol",
    "UserDirectoryProtocol",
]
