"""Description generation exceptions."""

from datasession.common.app_error import AppError
from datasession.config.errors import ErrorCode, ErrorNames

__all__ = ["GenerationFailedError"]


class GenerationFailedError(AppError):
    """Exception raised when the backend could not describe the dataset."""

    error_code = ErrorCode.GENERATION_FAILED
    title = ErrorNames.GENERATION_FAILED_TITLE
    message = "Description could not be generated"
