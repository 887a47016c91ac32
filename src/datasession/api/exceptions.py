"""Backend communication exceptions."""

from datasession.common.app_error import AppError
from datasession.common.exceptions import NotFoundError
from datasession.config.errors import ErrorCode, ErrorNames

__all__ = [
    "BackendRequestError",
    "BackendUnavailableError",
    "UploadStatsNotFoundError",
]


class BackendRequestError(AppError):
    """Exception raised when the backend answers with an error."""

    error_code = ErrorCode.BACKEND_ERROR
    message = ErrorNames.UNKNOWN_UPLOAD_ERROR

    def __init__(
        self, message: str | None = None, status_code: int | None = None
    ) -> None:
        """Initialize with the flattened message and the HTTP status."""
        self.status_code = status_code
        super().__init__(message)


class BackendUnavailableError(BackendRequestError):
    """Exception raised when the backend cannot be reached at all."""

    error_code = ErrorCode.BACKEND_UNAVAILABLE

    def __init__(self, url: str) -> None:
        """Initialize with the base URL that could not be reached."""
        super().__init__(ErrorNames.BACKEND_UNREACHABLE.format(url=url))


class UploadStatsNotFoundError(NotFoundError):
    """Exception raised when no statistics exist for an upload."""

    def __init__(self, upload_id: int | str) -> None:
        """Initialize with the upload ID."""
        super().__init__(f"Upload with ID {upload_id} not found")
