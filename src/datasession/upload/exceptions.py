"""Upload pipeline exceptions."""

from datasession.common.app_error import AppError
from datasession.config.errors import ErrorCode, ErrorNames

__all__ = [
    "InvalidFormatError",
    "PreviewFailedError",
    "SheetEnumerationFailedError",
    "SheetPreviewFailedError",
    "UnknownSheetError",
    "UploadRejectedError",
]


class InvalidFormatError(AppError):
    """Exception raised when the selected file is neither CSV nor Excel."""

    error_code = ErrorCode.INVALID_FORMAT
    title = ErrorNames.INVALID_FORMAT_TITLE
    message = ErrorNames.INVALID_FORMAT_DETAILS


class SheetEnumerationFailedError(AppError):
    """Exception raised when the sheets of a workbook cannot be listed."""

    error_code = ErrorCode.SHEET_ENUMERATION_FAILED
    title = ErrorNames.EXCEL_FAILED_TITLE
    message = ErrorNames.NO_SHEETS_FOUND


class UploadRejectedError(AppError):
    """Exception raised when the backend refuses an upload."""

    error_code = ErrorCode.UPLOAD_REJECTED
    title = ErrorNames.UPLOAD_FAILED_TITLE
    message = ErrorNames.UNKNOWN_UPLOAD_ERROR


class PreviewFailedError(AppError):
    """Exception raised when the preview of an accepted upload fails."""

    error_code = ErrorCode.PREVIEW_FAILED
    title = ErrorNames.PREVIEW_FAILED_TITLE
    message = "Preview could not be loaded"


class UnknownSheetError(AppError):
    """Exception raised when a sheet is not part of the workbook."""

    error_code = ErrorCode.CLIENT_ERROR
    title = ErrorNames.SHEET_PREVIEW_FAILED_TITLE

    def __init__(self, sheet_name: str) -> None:
        """Initialize with the sheet name."""
        super().__init__(f"Sheet '{sheet_name}' not found in workbook")


class SheetPreviewFailedError(PreviewFailedError):
    """Exception raised when the preview of a confirmed sheet fails."""

    title = ErrorNames.SHEET_PREVIEW_FAILED_TITLE
