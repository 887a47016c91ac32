"""Persisted fingerprint of the last committed upload."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field

from datasession.dataset.schemas import FileHandle, FileUpload

__all__ = ["LocalDatasetRecord"]


class LocalDatasetRecord(BaseModel):
    """Identity of the last committed upload, stored without its content.

    The serialized form keeps the camel-case keys of the web client storage
    entry (``name``, ``type``, ``lastModified``, ``isExcel``, ``selectedSheet``).
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    declared_type: str = Field(default="text/csv", alias="type")
    modified_at: int | None = Field(default=None, alias="lastModified")
    is_spreadsheet: bool = Field(default=False, alias="isExcel")
    selected_sheet: str | None = Field(default=None, alias="selectedSheet")

    @classmethod
    def from_upload(cls, upload: FileUpload) -> Self:
        """Fingerprint a file upload."""
        return cls(
            name=upload.file.name,
            declared_type=upload.file.content_type or "text/csv",
            modified_at=upload.file.last_modified,
            is_spreadsheet=upload.is_spreadsheet,
            selected_sheet=upload.selected_sheet,
        )

    def to_ghost(self) -> FileHandle:
        """Rebuild a display-only file handle from this record."""
        return FileHandle.ghost(
            self.name, content_type=self.declared_type, last_modified=self.modified_at
        )

    def describes(self, upload: FileUpload) -> bool:
        """Whether this record was written for the given upload."""
        if upload.file.name == self.name:
            return True
        # Workbooks are recorded under the name of their converted sheet
        return upload.is_spreadsheet and f"{upload.file.stem}.csv" == self.name
