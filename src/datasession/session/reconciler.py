"""Reconciliation of the local dataset belief with the server session."""

import asyncio
from enum import StrEnum

from loguru import logger

from datasession.api.client import BackendClient
from datasession.api.exceptions import BackendRequestError
from datasession.api.schemas import SessionInfo
from datasession.common.upload_status import UploadStatus
from datasession.config import settings
from datasession.dataset.schemas import DatasetDescription, FileHandle, FileUpload
from datasession.record.models import LocalDatasetRecord
from datasession.record.store import LocalRecordStore
from datasession.state import DatasetState
from datasession.upload.exceptions import PreviewFailedError
from datasession.upload.pipeline import UploadPipeline

from .default_dataset import DefaultDatasetLoader

__all__ = ["ReconcileCase", "SessionReconciler"]


class ReconcileCase(StrEnum):
    """Outcome of one reconciliation."""

    RESTORED = "restored"
    UNKNOWN_CUSTOM = "unknown_custom"
    SERVER_RESET = "server_reset"
    DEFAULT = "default"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


class SessionReconciler:
    """Compares the server's session record with the local one and repairs it.

    The server decides whether a custom dataset is active; the local record
    says which file the user committed last. Four outcomes follow:

    - custom dataset and a local record: the file is restored for display
      (without content) and its preview refreshed in the background;
    - custom dataset nobody here knows about: a display-only file is
      synthesized from the session's dataset name and a mismatch flagged;
    - no custom dataset although a file was uploaded successfully: the user
      is asked whether to keep it or to switch back to the default;
    - no custom dataset otherwise: the local record is dropped.
    """

    def __init__(
        self,
        client: BackendClient,
        state: DatasetState,
        store: LocalRecordStore,
        pipeline: UploadPipeline,
        default_loader: DefaultDatasetLoader,
    ) -> None:
        """Initialize the reconciler.

        Args:
            client: Backend client.
            state: Shared view state.
            store: Persisted record of the last committed upload.
            pipeline: Upload pipeline used for re-previews.
            default_loader: Loader used when the user gives up the custom file.
        """
        self.client = client
        self.state = state
        self.store = store
        self.pipeline = pipeline
        self.default_loader = default_loader
        self._running: set[str] = set()
        self._background: set[asyncio.Task[None]] = set()

    async def reconcile(self, session_id: str | None = None) -> ReconcileCase:
        """Reconcile the state with the server record of a session.

        Args:
            session_id: Session to check, defaults to the current one.

        Returns:
            The case that applied. SKIPPED if there is no session, the
            session changed meanwhile, or a reconciliation for the same
            session is already running.
        """
        session_id = session_id or self.state.session_id
        if not session_id:
            return ReconcileCase.SKIPPED
        if session_id in self._running:
            logger.debug("Reconciliation already running", sessionId=session_id)
            return ReconcileCase.SKIPPED

        self._running.add(session_id)
        try:
            return await self._reconcile(session_id)
        finally:
            self._running.discard(session_id)

    async def resolve(self, *, keep_custom: bool) -> bool:
        """Answer the mismatch prompt.

        Args:
            keep_custom: Keep the custom file instead of switching to the
                default dataset.

        Returns:
            Whether a preview is now shown. The mismatch prompt stays up
            when neither the custom file nor the default dataset could be
            previewed.
        """
        if keep_custom:
            upload = self.state.file_upload
            if upload is not None and not upload.file.is_placeholder:
                if await self.pipeline.preview_current() is None:
                    return False
                self.state.clear_resolution_flags()
                return True

            logger.info("Custom file has no content, asking for it again")
            self.state.clear_resolution_flags()
            self.pipeline.supersede()
            self.pipeline.discard()
            self.state.awaiting_file_selection = True
            return False

        # The loader drops the record and the prompt once the switch succeeded
        return await self.default_loader.preview_default()

    async def join(self) -> None:
        """Wait for background preview refreshes."""
        if self._background:
            await asyncio.gather(*self._background)

    def aclose(self) -> None:
        """Cancel background preview refreshes."""
        for task in self._background:
            task.cancel()

    async def _reconcile(self, session_id: str) -> ReconcileCase:
        try:
            info = await self.client.get_session_info(session_id)
        except BackendRequestError as e:
            logger.warning(
                "Failed to check session info", sessionId=session_id, error=e.message
            )
            return ReconcileCase.FAILED

        if self.state.session_id != session_id:
            logger.debug("Session changed during reconciliation", sessionId=session_id)
            return ReconcileCase.SKIPPED

        record = self.store.load()
        upload = self.state.file_upload

        if info.is_custom_dataset:
            if record is not None:
                self._restore(record, upload, session_id)
                case = ReconcileCase.RESTORED
            elif upload is None:
                self._synthesize(info)
                case = ReconcileCase.UNKNOWN_CUSTOM
            else:
                case = ReconcileCase.UNCHANGED
        elif upload is not None and upload.status is UploadStatus.SUCCESS:
            self.state.mismatch = True
            self.state.show_reset_prompt = True
            case = ReconcileCase.SERVER_RESET
        else:
            self.store.clear()
            if upload is not None and upload.status is not UploadStatus.LOADING:
                self.state.file_upload = None
            self.state.clear_resolution_flags()
            case = ReconcileCase.DEFAULT

        logger.info(
            "Session reconciled",
            sessionId=session_id,
            case=case,
            custom=info.is_custom_dataset,
            record=record is not None,
        )
        return case

    def _restore(
        self, record: LocalDatasetRecord, upload: FileUpload | None, session_id: str
    ) -> None:
        if upload is None or not record.describes(upload):
            sheets = [record.selected_sheet] if record.selected_sheet else []
            self.state.file_upload = FileUpload(
                file=record.to_ghost(),
                status=UploadStatus.SUCCESS,
                is_spreadsheet=record.is_spreadsheet,
                sheets=sheets,
                selected_sheet=record.selected_sheet,
            )
        self.state.clear_resolution_flags()

        task = asyncio.create_task(
            self._refresh_preview(session_id), name=f"refresh-preview:{session_id}"
        )
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    def _synthesize(self, info: SessionInfo) -> None:
        name = info.dataset_name or settings.custom_dataset_name
        self.state.file_upload = FileUpload(
            file=FileHandle.ghost(f"{name}.csv"), status=UploadStatus.SUCCESS
        )
        self.state.description = DatasetDescription(
            name=name, description=info.dataset_description or ""
        )
        self.state.mismatch = True

    async def _refresh_preview(self, session_id: str) -> None:
        try:
            await self.pipeline.refresh_preview(session_id)
        except PreviewFailedError as e:
            # The restored upload stays successful
            logger.warning(
                "Failed to refresh preview", sessionId=session_id, error=e.message
            )
