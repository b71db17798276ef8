"""Process introspection helpers."""

import psutil


def memory_usage_mb() -> float:
    """Resident set size of the current process in MB."""
    return psutil.Process().memory_info().rss / 1024 / 1024
