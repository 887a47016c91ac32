"""Final commit of the previewed dataset with its name and description."""

from loguru import logger

from datasession.api.client import BackendClient
from datasession.api.exceptions import BackendRequestError
from datasession.common.app_error import AppError
from datasession.common.upload_status import UploadStatus
from datasession.config import settings
from datasession.dataset.schemas import DatasetDescription, FileUpload
from datasession.record.models import LocalDatasetRecord
from datasession.record.store import LocalRecordStore
from datasession.state import DatasetState
from datasession.upload.pipeline import UploadPipeline
from datasession.utils.timer import Timer

from .exceptions import CommitFailedError, MissingMetadataError, StaleHandleError

__all__ = ["CommitController"]


class CommitController:
    """Sends the final dataset metadata and remembers what was committed."""

    def __init__(
        self,
        client: BackendClient,
        state: DatasetState,
        store: LocalRecordStore,
        pipeline: UploadPipeline,
        *,
        banner_delay: float | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Backend client.
            state: Shared view state.
            store: Persisted record of the last committed upload.
            pipeline: Upload pipeline, used to supersede in-flight previews.
            banner_delay: Seconds the success banner stays visible.
        """
        self.client = client
        self.state = state
        self.store = store
        self.pipeline = pipeline
        self.banner_delay = (
            settings.success_banner_delay if banner_delay is None else banner_delay
        )
        self._banner_timer = Timer("success-banner")

    async def commit(self, description: DatasetDescription | None = None) -> None:
        """Commit the current dataset.

        With a file attached the file is uploaded once more with the final
        metadata. Without one the metadata is attached to the default dataset.
        A commit superseded by a newer action while waiting for the backend
        leaves the state and the local record untouched.

        Args:
            description: Final name and description, defaults to the state's.

        Raises:
            MissingMetadataError: If name or description is empty.
            StaleHandleError: If the file was restored without its content.
            CommitFailedError: If the backend rejected the commit.
        """
        self.state.blocking_notice = None
        metadata = description or self.state.description
        if not metadata.is_complete:
            raise self._block(MissingMetadataError())

        upload = self.state.file_upload
        if upload is not None and upload.file.is_placeholder:
            logger.info(
                "Commit refused, file content unavailable", file=upload.file.name
            )
            self.pipeline.supersede()
            self.pipeline.discard()
            self.state.awaiting_file_selection = True
            raise self._block(StaleHandleError())

        token = self.pipeline.supersede()
        if upload is None:
            committed = await self._commit_default(token, metadata)
        else:
            committed = await self._commit_file(token, upload, metadata)

        if not committed:
            logger.debug("Commit superseded by a newer action", token=token)
            return

        self.state.description = metadata
        self.state.show_preview = False
        self.state.upload_success = True
        self._banner_timer.start(self.banner_delay, self._hide_banner)
        logger.info(
            "Dataset committed",
            name=metadata.name,
            custom=upload is not None,
            sessionId=self.state.session_id,
        )

    def aclose(self) -> None:
        """Cancel the success banner timer."""
        self._banner_timer.cancel()

    async def _commit_file(
        self, token: int, upload: FileUpload, metadata: DatasetDescription
    ) -> bool:
        session_id = self.state.session_id
        if session_id:
            try:
                await self.client.reset_session(session_id)
            except BackendRequestError as e:
                logger.warning("Failed to reset session before commit", error=e.message)
            if self._superseded(token):
                return False

        sheet = upload.selected_sheet if upload.is_spreadsheet else None
        try:
            response = await self.client.upload_dataset(
                upload.file,
                name=metadata.name,
                description=metadata.description,
                session_id=self.state.session_id,
                spreadsheet=upload.is_spreadsheet,
                sheet_name=sheet,
            )
        except BackendRequestError as e:
            if self._superseded(token):
                return False
            raise self._block(CommitFailedError(e.message)) from e

        if self._superseded(token):
            return False
        self.state.adopt_session(response.session_id)
        committed = upload.model_copy(
            update={
                "status": UploadStatus.SUCCESS,
                "error_message": None,
                "dataset_upload_id": response.dataset_upload_id
                or upload.dataset_upload_id,
            }
        )
        self.state.file_upload = committed

        record = LocalDatasetRecord.from_upload(committed)
        if committed.is_spreadsheet:
            # The backend keeps the converted sheet as CSV
            record.name = f"{committed.file.stem}.csv"
            record.declared_type = "text/csv"
        self.store.save(record)
        return True

    async def _commit_default(self, token: int, metadata: DatasetDescription) -> bool:
        try:
            await self.client.reset_session(
                self.state.session_id,
                name=metadata.name,
                description=metadata.description,
            )
        except BackendRequestError as e:
            if self._superseded(token):
                return False
            raise self._block(CommitFailedError(e.message)) from e

        if self._superseded(token):
            return False
        self.store.clear()
        return True

    def _superseded(self, token: int) -> bool:
        return token != self.pipeline.token

    def _block(self, error: AppError) -> AppError:
        self.state.blocking_notice = error.message
        logger.warning("Commit failed", error=error.error_code, detail=error.message)
        return error

    def _hide_banner(self) -> None:
        self.state.upload_success = False
