"""
Shared Utilities

Responsibility:
    Generic helpers used across the application layers.

Contains:
    - call_with_timeout: bound a blocking call by a wall-clock timeout
    - unique_filename: collision-free blob names for uploads and exports
    - validate_blob_name: reject blob names carrying path components
    - memory_usage_mb: resident memory of the current process (stage logs)

Does NOT contain:
    - Domain-specific utilities (use Domain layer)
    - Infrastructure utilities (use Infrastructure layer)
"""

from taskpilot_bulk.shared.utils.filenames import unique_filename, validate_blob_name
from taskpilot_bulk.shared.utils.process import memory_usage_mb
from taskpilot_bulk.shared.utils.timeouts import call_with_timeout

__all__ = ["call_with_timeout", "memory_usage_mb", "unique_filename", "validate_blob_name"]
