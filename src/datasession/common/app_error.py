"""Generic application errors."""

from datasession.config.errors import ErrorCode

__all__ = ["AppError"]


class AppError(Exception):
    """Base exception for application errors."""

    error_code = ErrorCode.CLIENT_ERROR
    message = "An unexpected error occurred"
    title = "Something went wrong"
    auto_dismiss = True

    def __init__(self, message: str | None = None) -> None:
        """Initialize with optional custom message."""
        if message:
            self.message = message
        super().__init__(self.message)
