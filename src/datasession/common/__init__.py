"""Common module for shared error types and status enums.

Key Components:
- App errors: Application-specific error types with structured error codes
  and an auto-dismiss flag deciding how the UI layer surfaces them
- Upload status: The three states a file upload can be in
"""

from .app_error import AppError
from .exceptions import NotFoundError
from .upload_status import UploadStatus

__all__ = ["AppError", "NotFoundError", "UploadStatus"]
