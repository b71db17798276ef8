"""
Shared Domain - cross-cutting domain concepts.

Exports:
    - DomainException and the bulk job error hierarchy
"""

from .exceptions import (
    BlobNotFoundError,
    ConfigurationError,
    DomainException,
    EmptySheetError,
    ExcelParsingError,
    ImportCancelledError,
    InvalidJobMessageError,
    JobEnqueueError,
    JobNotFoundError,
    JobStateTransitionError,
    MissingHeadersError,
    RowProcessingError,
    StepTimeoutError,
    StorageError,
)

__all__ = [
    "BlobNotFoundError",
    "ConfigurationError",
    "DomainException",
    "EmptySheetError",
    "ExcelParsingError",
    "ImportCancelledError",
    "InvalidJobMessageError",
    "JobEnqueueError",
    "JobNotFoundError",
    "JobStateTransitionError",
    "MissingHeadersError",
    "RowProcessingError",
    "StepTimeoutError",
    "StorageError",
]
