"""Facade wiring the dataset flow for a host UI."""

from collections.abc import Awaitable
from pathlib import Path
from types import TracebackType
from typing import Self, TypeVar

import httpx
from loguru import logger

from datasession.api.client import BackendClient
from datasession.api.exceptions import BackendRequestError, UploadStatsNotFoundError
from datasession.commit.controller import CommitController
from datasession.common.app_error import AppError
from datasession.dataset.schemas import FileHandle, FilePreview, FileUpload
from datasession.description.exceptions import GenerationFailedError
from datasession.description.generator import DescriptionGenerator
from datasession.notify.notifier import ErrorNotification, ErrorNotifier
from datasession.record.store import LocalRecordStore
from datasession.session.default_dataset import DefaultDatasetLoader
from datasession.session.events import (
    CreditsChanged,
    EventDispatcher,
    SessionChanged,
    SessionEvent,
)
from datasession.session.reconciler import ReconcileCase, SessionReconciler
from datasession.state import DatasetState
from datasession.upload.exceptions import UnknownSheetError
from datasession.upload.pipeline import UploadPipeline

__all__ = ["DatasetSessionController"]

T = TypeVar("T")


class DatasetSessionController:
    """Entry point for a host UI attaching datasets to a session.

    Every operation catches ``AppError`` at this boundary: the failure is
    logged, kept in ``last_error`` and visible in the state (notification,
    blocking notice or upload status), and the operation returns ``None`` or
    ``False``.
    """

    def __init__(
        self,
        session_id: str | None = None,
        *,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        record_path: Path | None = None,
        error_dismiss_delay: float | None = None,
        success_banner_delay: float | None = None,
        description_settle_delay: float | None = None,
    ) -> None:
        """Initialize the controller and its components.

        Args:
            session_id: Session to start with.
            base_url: Backend root URL, defaults to the configured one.
            http_client: Preconfigured HTTP client, owned by the caller.
            record_path: File holding the local record.
            error_dismiss_delay: Seconds before errors are dismissed.
            success_banner_delay: Seconds the commit banner stays visible.
            description_settle_delay: Seconds before the automatic description.
        """
        self.state = DatasetState(session_id=session_id)
        self.client = BackendClient(base_url, http_client=http_client)
        self.store = LocalRecordStore(record_path)
        self.notifier = ErrorNotifier(error_dismiss_delay)
        self.generator = DescriptionGenerator(self.client, self.state)
        self.pipeline = UploadPipeline(
            self.client,
            self.state,
            self.store,
            self.notifier,
            self.generator,
            settle_delay=description_settle_delay,
        )
        self.committer = CommitController(
            self.client,
            self.state,
            self.store,
            self.pipeline,
            banner_delay=success_banner_delay,
        )
        self.default_loader = DefaultDatasetLoader(
            self.client, self.state, self.store, self.pipeline
        )
        self.reconciler = SessionReconciler(
            self.client, self.state, self.store, self.pipeline, self.default_loader
        )
        self.dispatcher = EventDispatcher(self.state, self.pipeline, self.reconciler)
        self.last_error: AppError | None = None

    async def __aenter__(self) -> Self:
        """Enter the async context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Cancel pending work and close the backend client."""
        await self.aclose()

    @property
    def notification(self) -> ErrorNotification | None:
        """Error notification currently shown."""
        return self.notifier.current

    # -------------------------------------------------------------------------
    # Events -------------------------------------------------------------------
    # -------------------------------------------------------------------------

    async def dispatch(self, event: SessionEvent) -> ReconcileCase:
        """Handle a host event."""
        return await self.dispatcher.dispatch(event)

    async def session_changed(self, session_id: str | None) -> ReconcileCase:
        """Handle a session switch of the host."""
        return await self.dispatch(SessionChanged(session_id=session_id))

    async def credits_changed(self) -> ReconcileCase:
        """Handle a credit balance change of the host."""
        return await self.dispatch(CreditsChanged())

    async def resolve_mismatch(self, *, keep_custom: bool) -> bool:
        """Answer the mismatch prompt."""
        result = await self._guard(
            "resolve_mismatch", self.reconciler.resolve(keep_custom=keep_custom)
        )
        return bool(result)

    # -------------------------------------------------------------------------
    # Upload -------------------------------------------------------------------
    # -------------------------------------------------------------------------

    async def select_file(
        self, file: FileHandle | Path, *, is_new_dataset: bool = True
    ) -> FileUpload | None:
        """Start the pipeline for a newly selected file."""
        if isinstance(file, Path):
            file = FileHandle.from_path(file)
        return await self._guard(
            "select_file",
            self.pipeline.begin_upload(file, is_new_dataset=is_new_dataset),
        )

    def select_sheet(self, sheet_name: str) -> bool:
        """Change the pending sheet selection."""
        try:
            self.pipeline.select_sheet(sheet_name)
        except AppError as e:
            self._report("select_sheet", e)
            self.notifier.notify_error(e)
            return False
        return True

    async def confirm_sheet(self, sheet_name: str | None = None) -> FilePreview | None:
        """Upload and preview the chosen sheet."""
        return await self._guard(
            "confirm_sheet",
            self.pipeline.confirm_sheet(sheet_name),
            notify=UnknownSheetError,
        )

    async def preview_current(self) -> FilePreview | None:
        """Preview the current file again."""
        return await self._guard("preview_current", self.pipeline.preview_current())

    async def preview_default(self) -> bool:
        """Switch to the default dataset and preview it."""
        return await self.default_loader.preview_default()

    async def load_default_silently(self) -> bool:
        """Switch to the default dataset without opening the preview."""
        return await self.default_loader.load_default_silently()

    def clear_file(self) -> bool:
        """Forget the current file."""
        return self.pipeline.clear_file()

    def close_preview(self) -> bool:
        """Close the preview dialog."""
        return self.pipeline.close_preview()

    def dismiss_sheet_selector(self) -> None:
        """Close the sheet selector."""
        self.pipeline.dismiss_sheet_selector()

    # -------------------------------------------------------------------------
    # Description and commit ---------------------------------------------------
    # -------------------------------------------------------------------------

    def edit_description(
        self, name: str | None = None, description: str | None = None
    ) -> None:
        """Apply a user edit to the dataset name or description."""
        self.state.edit_description(name=name, description=description)
        self.state.blocking_notice = None

    async def generate_description(self) -> str | None:
        """Let the backend describe the current dataset."""
        return await self._guard(
            "generate_description",
            self.generator.generate(),
            notify=GenerationFailedError,
        )

    async def commit(self) -> bool:
        """Commit the dataset with the current name and description."""
        try:
            await self.committer.commit()
        except AppError as e:
            self._report("commit", e)
            return False
        return True

    async def upload_diagnostics(self) -> str | None:
        """Describe how the backend processed the current upload."""
        upload = self.state.file_upload
        if upload is None or upload.dataset_upload_id is None:
            return None
        try:
            stats = await self.client.get_upload_stats(upload.dataset_upload_id)
        except (BackendRequestError, UploadStatsNotFoundError) as e:
            logger.debug("Upload statistics unavailable", error=e.message)
            return None
        return stats.summary()

    # -------------------------------------------------------------------------
    # Lifecycle ----------------------------------------------------------------
    # -------------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait for background refreshes and a scheduled description."""
        await self.reconciler.join()
        await self.pipeline.wait_for_description()

    async def aclose(self) -> None:
        """Cancel timers and background work and close the backend client."""
        self.pipeline.aclose()
        self.committer.aclose()
        self.reconciler.aclose()
        self.notifier.clear()
        await self.client.aclose()

    async def _guard(
        self,
        operation: str,
        call: Awaitable[T],
        *,
        notify: type[AppError] | None = None,
    ) -> T | None:
        """Run an operation, reporting application errors instead of raising.

        Pipeline failures already reach the notifier themselves; ``notify``
        names the error type this operation has to show on its own.
        """
        try:
            return await call
        except AppError as e:
            self._report(operation, e)
            if notify is not None and isinstance(e, notify):
                self.notifier.notify_error(e)
            return None

    def _report(self, operation: str, error: AppError) -> None:
        self.last_error = error
        logger.warning(
            "Operation failed",
            operation=operation,
            error=error.error_code,
            detail=error.message,
        )
