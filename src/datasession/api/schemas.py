"""Response payloads returned by the dataset backend."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "DatasetPayload",
    "DefaultDatasetResponse",
    "SessionInfo",
    "UploadResponse",
    "UploadStats",
]


class UploadResponse(BaseModel):
    """Answer of ``upload_dataframe`` and ``upload_excel``."""

    model_config = ConfigDict(extra="ignore")

    session_id: str | None = None
    dataset_upload_id: int | str | None = None


class DatasetPayload(BaseModel):
    """Preview sample plus the name and description the server echoes."""

    model_config = ConfigDict(extra="ignore")

    headers: list[str] = Field(default_factory=list)
    rows: list[list[Any]] = Field(default_factory=list)
    name: str | None = None
    description: str | None = None


class DefaultDatasetResponse(DatasetPayload):
    """Answer of ``default-dataset``."""

    session_id: str | None = None


class SessionInfo(BaseModel):
    """Server-side view of the dataset attached to a session."""

    model_config = ConfigDict(extra="ignore")

    is_custom_dataset: bool = False
    dataset_name: str | None = None
    dataset_description: str | None = None


class UploadStats(BaseModel):
    """Processing statistics of one dataset upload."""

    model_config = ConfigDict(extra="ignore")

    upload_id: int | str
    status: str
    file_size: int = 0
    row_count: int | None = None
    column_count: int | None = None
    processing_time_ms: int | None = None
    error_message: str | None = None
    error_details: Any = None

    def summary(self) -> str:
        """Render the statistics as a single diagnostic line."""
        if self.status == "completed":
            parts = [
                f"{self.row_count or 0:,} rows × {self.column_count or 0} columns",
                f"{round(self.file_size / 1024)} KB",
            ]
            if self.processing_time_ms:
                parts.append(f"{self.processing_time_ms}ms")
            return " • ".join(parts)

        if self.status == "failed":
            line = f"Upload failed: {self.error_message or 'unknown error'}"
            if self.error_details:
                line += f" ({self.error_details})"
            return line

        return "Processing upload..."
