"""View state shared by the dataset flow components."""

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from datasession.dataset.schemas import DatasetDescription, FilePreview, FileUpload

__all__ = ["DatasetState"]


class DatasetState(BaseModel):
    """Everything the UI layer renders about the attached dataset.

    Components mutate this object in place; the UI reads it after every
    awaited operation.
    """

    model_config = ConfigDict(validate_assignment=False)

    session_id: str | None = None
    file_upload: FileUpload | None = None
    file_preview: FilePreview | None = None
    description: DatasetDescription = Field(default_factory=DatasetDescription)

    # Dialogs
    show_preview: bool = False
    show_sheet_selector: bool = False
    show_reset_prompt: bool = False

    # Reconciliation
    mismatch: bool = False
    awaiting_file_selection: bool = False

    # Commit feedback
    upload_success: bool = False
    blocking_notice: str | None = None

    def adopt_session(self, session_id: str | None) -> None:
        """Switch to a fresher session ID handed out by the backend."""
        if session_id and session_id != self.session_id:
            logger.debug(
                "Adopting session", previous=self.session_id, sessionId=session_id
            )
            self.session_id = session_id

    def edit_description(
        self, name: str | None = None, description: str | None = None
    ) -> None:
        """Apply a user edit to the dataset name or description."""
        update = {}
        if name is not None:
            update["name"] = name
        if description is not None:
            update["description"] = description
        self.description = self.description.model_copy(update=update)

    def clear_resolution_flags(self) -> None:
        """Forget any pending mismatch prompt."""
        self.mismatch = False
        self.show_reset_prompt = False
