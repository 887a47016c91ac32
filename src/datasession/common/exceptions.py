"""Common exceptions."""

from datasession.config.errors import ErrorCode

from .app_error import AppError

__all__ = ["NotFoundError"]


class NotFoundError(AppError):
    """Exception raised when something is not found."""

    error_code = ErrorCode.NOT_FOUND
    message = "Resource not found"
