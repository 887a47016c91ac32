"""File formats accepted for datasets and the classifier deciding between them."""

from enum import StrEnum
from pathlib import PurePath
from typing import Final

__all__ = ["FileFormat", "FileKind", "classify_file"]


class FileFormat(StrEnum):
    """Supported file formats for datasets."""

    # No abbreviation to preserve extension names
    CSV = "csv"
    EXCEL = "xlsx"
    EXCEL_LEGACY = "xls"


class FileKind(StrEnum):
    """How the upload pipeline has to treat a selected file."""

    CSV = "csv"
    EXCEL = "excel"
    UNSUPPORTED = "unsupported"


_EXTENSION_KINDS: Final[dict[str, FileKind]] = {
    FileFormat.CSV: FileKind.CSV,
    FileFormat.EXCEL: FileKind.EXCEL,
    FileFormat.EXCEL_LEGACY: FileKind.EXCEL,
}

_MIME_KINDS: Final[dict[str, FileKind]] = {
    "text/csv": FileKind.CSV,
    "application/csv": FileKind.CSV,
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": (
        FileKind.EXCEL
    ),
    "application/vnd.ms-excel": FileKind.EXCEL,
}


def classify_file(name: str, content_type: str | None = None) -> FileKind:
    """Classify a file by extension first, then by its declared MIME type.

    Args:
        name: File name as chosen by the user.
        content_type: MIME type declared for the file, may be empty.

    Returns:
        FileKind: ``CSV`` or ``EXCEL`` when either signal matches, otherwise
        ``UNSUPPORTED``.
    """
    ext = PurePath(name).suffix.lstrip(".").lower()
    if ext in _EXTENSION_KINDS:
        return _EXTENSION_KINDS[ext]

    declared = (content_type or "").split(";")[0].strip().lower()
    return _MIME_KINDS.get(declared, FileKind.UNSUPPORTED)
