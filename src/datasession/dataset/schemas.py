"""Schemas describing the file being attached and the dataset it becomes."""

import mimetypes
from pathlib import Path
from typing import Any, Self

import pandas as pd
from pydantic import BaseModel, Field, model_validator

from datasession.common.upload_status import UploadStatus

from .constants import GENERATING_DESCRIPTION
from .file_format import FileKind, classify_file

__all__ = [
    "DatasetDescription",
    "FileHandle",
    "FilePreview",
    "FileUpload",
]


class FileHandle(BaseModel):
    """A selected file: its bytes plus the metadata the user agent reports."""

    name: str = Field(description="File name including extension")
    content: bytes = Field(default=b"", repr=False, description="Raw file content")
    content_type: str = Field(default="", description="Declared MIME type")
    last_modified: int | None = Field(
        default=None, description="Modification time in epoch milliseconds"
    )
    placeholder: bool = Field(
        default=False,
        description="Rebuilt from persisted metadata, carries no content",
    )

    @property
    def size(self) -> int:
        """Number of content bytes."""
        return len(self.content)

    @property
    def kind(self) -> FileKind:
        """Classification of this file."""
        return classify_file(self.name, self.content_type)

    @property
    def stem(self) -> str:
        """File name without its extension."""
        return Path(self.name).stem

    @property
    def is_placeholder(self) -> bool:
        """Whether the handle has no real bytes behind it."""
        return self.placeholder or (self.size == 0 and not self.last_modified)

    @classmethod
    def from_path(cls, path: Path, content_type: str | None = None) -> Self:
        """Read a file from disk into a handle.

        Args:
            path: Location of the file.
            content_type: Declared MIME type, guessed from the name if omitted.

        Returns:
            FileHandle with content and modification time filled in.
        """
        if content_type is None:
            content_type = mimetypes.guess_type(path.name)[0] or ""
        return cls(
            name=path.name,
            content=path.read_bytes(),
            content_type=content_type,
            last_modified=int(path.stat().st_mtime * 1000),
        )

    @classmethod
    def ghost(
        cls, name: str, content_type: str = "text/csv", last_modified: int | None = None
    ) -> Self:
        """Build a display-only handle without content."""
        return cls(
            name=name,
            content_type=content_type,
            last_modified=last_modified,
            placeholder=True,
        )


class FileUpload(BaseModel):
    """The single file upload the client currently tracks."""

    file: FileHandle
    status: UploadStatus = UploadStatus.LOADING
    error_message: str | None = None
    is_spreadsheet: bool = False
    sheets: list[str] = Field(default_factory=list)
    selected_sheet: str | None = None
    dataset_upload_id: int | str | None = None

    @model_validator(mode="after")
    def check_selected_sheet(self) -> Self:
        """Ensure the selected sheet is one of the enumerated sheets."""
        if self.selected_sheet is not None and self.selected_sheet not in self.sheets:
            raise ValueError(
                f"Sheet '{self.selected_sheet}' is not one of {self.sheets}"
            )
        return self

    def select_sheet(self, sheet_name: str) -> None:
        """Change the selected sheet, keeping the sheet invariant."""
        if sheet_name not in self.sheets:
            raise ValueError(f"Sheet '{sheet_name}' is not one of {self.sheets}")
        self.selected_sheet = sheet_name

    def fail(self, message: str) -> None:
        """Move the upload into the error state."""
        self.status = UploadStatus.ERROR
        self.error_message = message

    def succeed(self) -> None:
        """Move the upload into the success state."""
        self.status = UploadStatus.SUCCESS
        self.error_message = None


class DatasetDescription(BaseModel):
    """Name and description the user attaches to a dataset."""

    name: str = ""
    description: str = ""

    @property
    def is_generating(self) -> bool:
        """Whether the description holds the generation sentinel."""
        return self.description == GENERATING_DESCRIPTION

    @property
    def is_complete(self) -> bool:
        """Whether both fields carry real user-facing text."""
        return bool(
            self.name.strip() and self.description.strip() and not self.is_generating
        )


class FilePreview(BaseModel):
    """Sample of a dataset for read-only rendering."""

    headers: list[str] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    name: str = ""
    description: str = ""

    def to_frame(self) -> pd.DataFrame:
        """Return the preview sample as a DataFrame."""
        return pd.DataFrame(self.rows, columns=self.headers or None)
