"""Upload module for datasession.

Turns a selected file into a previewed dataset: format classification,
session reset, workbook sheet listing and selection, upload and preview.
Each run of the pipeline is identified by a token so that late responses of
superseded runs never reach the shared state.
"""

from .exceptions import (
    InvalidFormatError,
    PreviewFailedError,
    SheetEnumerationFailedError,
    SheetPreviewFailedError,
    UnknownSheetError,
    UploadRejectedError,
)
from .pipeline import UploadPipeline

__all__ = [
    "InvalidFormatError",
    "PreviewFailedError",
    "SheetEnumerationFailedError",
    "SheetPreviewFailedError",
    "UnknownSheetError",
    "UploadPipeline",
    "UploadRejectedError",
]
