"""Commit exceptions.

None of these are dismissed automatically; the user has to act on them.
"""

from datasession.common.app_error import AppError
from datasession.config.errors import ErrorCode, ErrorNames

__all__ = ["CommitFailedError", "MissingMetadataError", "StaleHandleError"]


class MissingMetadataError(AppError):
    """Exception raised when name or description is empty."""

    error_code = ErrorCode.MISSING_METADATA
    title = "Missing information"
    message = ErrorNames.MISSING_METADATA_DETAILS
    auto_dismiss = False


class StaleHandleError(AppError):
    """Exception raised when the file was restored without its content."""

    error_code = ErrorCode.STALE_HANDLE
    title = "File needs to be selected again"
    message = ErrorNames.STALE_HANDLE_DETAILS
    auto_dismiss = False


class CommitFailedError(AppError):
    """Exception raised when the backend rejects the final upload."""

    error_code = ErrorCode.COMMIT_FAILED
    title = "Failed to process dataset"
    message = "Failed to process dataset. Please try again."
    auto_dismiss = False

    def __init__(self, reason: str | None = None) -> None:
        """Initialize with the backend's reason."""
        super().__init__(f"Upload failed: {reason}" if reason else None)
