"""Dataset module for datasession.

Provides the file classifier and the models describing the file being
attached, its preview sample and the name/description the user gives it.
"""

from .constants import GENERATING_DESCRIPTION, PREVIEW_DESCRIPTION
from .file_format import FileFormat, FileKind, classify_file
from .schemas import DatasetDescription, FileHandle, FilePreview, FileUpload

__all__ = [
    "GENERATING_DESCRIPTION",
    "PREVIEW_DESCRIPTION",
    "DatasetDescription",
    "FileFormat",
    "FileHandle",
    "FileKind",
    "FilePreview",
    "FileUpload",
    "classify_file",
]
