"""
Job Publisher Port

Hands job descriptors to the durable queue. Implementations must raise on
failure so the submission service can surface it (and compensate).
"""

from typing import Protocol, Union, runtime_checkable

from taskpilot_bulk.application.models import ExportJobMessage, ImportJobMessage


@runtime_checkable
class JobPublisherProtocol(Protocol):
    def publish(self, message: Union[ImportJobMessage, ExportJobMessage]) -> None: ...
