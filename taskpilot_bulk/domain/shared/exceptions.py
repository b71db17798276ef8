"""
Domain Layer Exceptions

This module defines the exception hierarchy shared by every layer of the
bulk import/export subsystem. All errors that can end a job carry a
human-readable message, because that message is stored verbatim as the
job's error_message and returned by the status endpoint.

Responsibility:
    - Base exception class for domain errors
    - Typed errors for each failure class of a job pipeline
    - Structured attributes (missing headers, row number, job id) for tests
      and for callers that want more than the message

Error Taxonomy:
    - Protocol errors: InvalidJobMessageError (message rejected, no job mutation)
    - Transient I/O errors: StorageError, BlobNotFoundError, StepTimeoutError
    - Domain/validation errors: MissingHeadersError, EmptySheetError,
      ExcelParsingError, RowProcessingError, ImportCancelledError
    - Job state errors: JobNotFoundError, JobStateTransitionError
    - Submission errors: JobEnqueueError
    - Startup errors: ConfigurationError
"""


class DomainException(Exception):
    """
    Base exception for all domain layer errors.

    Root of the exception hierarchy. The worker catches this class to turn
    any expected failure into a failed job; anything else is treated as an
    unexpected error but still fails the job.

    Examples:
        >>> raise DomainException("Business rule violation")

        >>> try:
        ...     importer.import_file(path, headers, owner_id=7)
        ... except DomainException as e:
        ...     logger.error(f"Import failed: {e.message}")
    """

    def __init__(self, message: str) -> None:
        """
        Initialize domain exception with error message.

        Args:
            message: Human-readable error description
        """
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.__class__.__name__}: {self.message}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(message={self.message!r})"


class ConfigurationError(DomainException):
    """Raised at startup when settings are missing or inconsistent."""


class InvalidJobMessageError(DomainException):
    """
    Raised when a queue payload cannot be deserialized into a job message.

    This is a protocol-level rejection: the delivery is negatively
    acknowledged and no job record is touched, because the job id itself
    cannot be trusted.

    Attributes:
        payload: The raw payload that failed validation (optional)
    """

    def __init__(self, message: str, payload: object | None = None) -> None:
        """
        Initialize invalid message error.

        Args:
            message: Validation error description
            payload: Raw payload received from the queue (optional)
        """
        self.payload = payload
        super().__init__(message)


class StorageError(DomainException):
    """
    Raised when a storage backend operation fails.

    Wraps OSError (local backend) and botocore errors (S3 backend) so the
    worker handles both backends through one exception type.

    Attributes:
        blob_name: Name of the blob involved (optional)
        original_error: Underlying exception (optional)
    """

    def __init__(
        self,
        message: str,
        blob_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error description
            blob_name: Blob the operation was about (optional)
            original_error: Exception raised by the backend (optional)
        """
        self.blob_name = blob_name
        self.original_error = original_error

        detailed_parts = [message]
        if blob_name:
            detailed_parts.append(f"Blob: {blob_name}")
        if original_error:
            detailed_parts.append(
                f"Original error: {type(original_error).__name__}: {original_error}"
            )
        super().__init__(" | ".join(detailed_parts))


class BlobNotFoundError(StorageError):
    """Raised by download() when the requested blob does not exist."""


class StepTimeoutError(DomainException):
    """
    Raised when a single pipeline step exceeds its time budget.

    Attributes:
        step: Name of the step that timed out (e.g. "download")
        timeout_seconds: Budget that was exceeded
    """

    def __init__(self, step: str, timeout_seconds: float) -> None:
        """
        Initialize timeout error.

        Args:
            step: Pipeline step name
            timeout_seconds: Timeout that was exceeded
        """
        self.step = step
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Step '{step}' timed out after {timeout_seconds:g}s")


class ExcelParsingError(DomainException):
    """
    Raised when a spreadsheet file cannot be opened or read.

    Attributes:
        file_path: Path to the file that failed parsing (optional)
        original_error: Original exception from openpyxl (optional)
    """

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize Excel parsing error.

        Args:
            message: Error description
            file_path: Path to file that failed (optional)
            original_error: Original exception from openpyxl (optional)
        """
        self.file_path = file_path
        self.original_error = original_error

        detailed_parts = [message]
        if file_path:
            detailed_parts.append(f"File: {file_path}")
        if original_error:
            detailed_parts.append(
                f"Original error: {type(original_error).__name__}: {original_error}"
            )
        super().__init__(" | ".join(detailed_parts))


class MissingHeadersError(DomainException):
    """
    Raised when row 1 lacks one or more expected column names.

    Header matching is case-insensitive and ignores order and extra columns,
    so this error lists only the names that are truly absent.

    Attributes:
        missing_headers: Expected names not found in row 1 (in expected order)
        found_headers: Header cells actually present in row 1

    Examples:
        >>> raise MissingHeadersError(["color"], found_headers=["name", "description"])
    """

    def __init__(
        self, missing_headers: list[str], found_headers: list[str] | None = None
    ) -> None:
        """
        Initialize missing headers error.

        Args:
            missing_headers: Expected header names that were not found
            found_headers: Header names present in the file (optional)
        """
        self.missing_headers = missing_headers
        self.found_headers = found_headers or []
        super().__init__(f"Missing required headers: {', '.join(missing_headers)}")


class EmptySheetError(DomainException):
    """Raised when a spreadsheet has no header row or no data rows."""


class RowProcessingError(DomainException):
    """
    Raised when the domain handler rejects one data row.

    The import stops at the first failing row. Rows before it stay
    committed, so the row number tells the user where to resume.

    Attributes:
        row_number: Excel row number (1-based, header is row 1)
        original_error: Exception raised by the row handler (optional)
    """

    def __init__(
        self,
        message: str,
        row_number: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize row processing error.

        Args:
            message: Error description
            row_number: Excel row number of the failing row (optional)
            original_error: Exception raised by the handler (optional)
        """
        self.row_number = row_number
        self.original_error = original_error
        if row_number is not None:
            message = f"Row {row_number}: {message}"
        super().__init__(message)


class ImportCancelledError(DomainException):
    """Raised when an import is abandoned between rows (step timeout)."""


class JobNotFoundError(DomainException):
    """
    Raised when a job id is unknown or belongs to another owner.

    Both cases produce the same error so that job ids of other users
    cannot be probed.

    Attributes:
        job_id: Job id that was looked up
    """

    def __init__(self, job_id: str) -> None:
        """
        Initialize job not found error.

        Args:
            job_id: Job id that could not be resolved
        """
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found")


class JobStateTransitionError(DomainException):
    """
    Raised when an update would move a job out of a terminal status.

    Attributes:
        job_id: Job id
        current_status: Status the job is in
        requested_status: Status the caller tried to set
    """

    def __init__(
        self, job_id: str, current_status: str, requested_status: str
    ) -> None:
        """
        Initialize state transition error.

        Args:
            job_id: Job id
            current_status: Current (terminal) status value
            requested_status: Requested status value
        """
        self.job_id = job_id
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Job {job_id} is already {current_status}, "
            f"cannot change status to {requested_status}"
        )


class JobEnqueueError(DomainException):
    """
    Raised by the submission service when publishing to the queue fails.

    Attributes:
        job_id: Id of the job record that was created before publishing
        original_error: Exception raised by the publisher (optional)
    """

    def __init__(
        self, job_id: str, original_error: Exception | None = None
    ) -> None:
        """
        Initialize enqueue error.

        Args:
            job_id: Id of the job that could not be enqueued
            original_error: Publisher exception (optional)
        """
        self.job_id = job_id
        self.original_error = original_error
        super().__init__(f"Failed to enqueue job {job_id}")
