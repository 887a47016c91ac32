"""Text constants for consistent error handling."""

from enum import StrEnum

__all__ = ["ErrorCode", "ErrorNames"]


class ErrorCode(StrEnum):
    """Error codes for standardized error handling."""

    # General errors
    CLIENT_ERROR = "CLIENT_ERROR"
    BACKEND_ERROR = "BACKEND_ERROR"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    NOT_FOUND = "NOT_FOUND"

    # Upload pipeline errors
    INVALID_FORMAT = "INVALID_FORMAT"
    SHEET_ENUMERATION_FAILED = "SHEET_ENUMERATION_FAILED"
    UPLOAD_REJECTED = "UPLOAD_REJECTED"
    PREVIEW_FAILED = "PREVIEW_FAILED"

    # Commit errors
    MISSING_METADATA = "MISSING_METADATA"
    STALE_HANDLE = "STALE_HANDLE"
    COMMIT_FAILED = "COMMIT_FAILED"

    # Description errors
    GENERATION_FAILED = "GENERATION_FAILED"


class ErrorNames(StrEnum):
    """Error names for standardized error handling."""

    UNKNOWN_UPLOAD_ERROR = "Upload failed. Please try again."
    FILE_TOO_LARGE = "File too large. Please upload a smaller file."
    INVALID_FILE_TYPE = "Invalid file type. Please upload a CSV file."
    BACKEND_UNREACHABLE = "Cannot connect to backend API server at {url}"

    # Notification titles
    INVALID_FORMAT_TITLE = "Invalid file format"
    EXCEL_FAILED_TITLE = "Excel processing failed"
    UPLOAD_FAILED_TITLE = "File upload failed"
    PREVIEW_FAILED_TITLE = "File preview failed"
    SHEET_PREVIEW_FAILED_TITLE = "Sheet preview failed"
    GENERATION_FAILED_TITLE = "Description generation failed"

    # Details
    INVALID_FORMAT_DETAILS = (
        "Please upload a CSV or Excel file only. "
        "Other file formats are not supported."
    )
    NO_SHEETS_FOUND = "No sheets found in Excel file"
    MISSING_METADATA_DETAILS = (
        "Please provide both a name and description for the dataset"
    )
    STALE_HANDLE_DETAILS = "Please select your dataset file again to upload it"
