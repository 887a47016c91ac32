"""UploadStatus model for the file being attached."""

from enum import StrEnum

__all__ = ["UploadStatus"]


class UploadStatus(StrEnum):
    """Status of the current file upload."""

    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
