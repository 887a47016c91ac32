"""Upload pipeline: classify, reset, enumerate sheets, upload, preview."""

from loguru import logger

from datasession.api.client import BackendClient
from datasession.api.exceptions import BackendRequestError
from datasession.common.app_error import AppError
from datasession.common.upload_status import UploadStatus
from datasession.config import settings
from datasession.dataset.constants import GENERATING_DESCRIPTION, PREVIEW_DESCRIPTION
from datasession.dataset.file_format import FileKind
from datasession.dataset.schemas import (
    DatasetDescription,
    FileHandle,
    FilePreview,
    FileUpload,
)
from datasession.description.exceptions import GenerationFailedError
from datasession.description.generator import DescriptionGenerator
from datasession.notify.notifier import ErrorNotifier
from datasession.record.store import LocalRecordStore
from datasession.state import DatasetState
from datasession.utils.timer import Timer

from .exceptions import (
    InvalidFormatError,
    PreviewFailedError,
    SheetEnumerationFailedError,
    SheetPreviewFailedError,
    UnknownSheetError,
    UploadRejectedError,
)

__all__ = ["UploadPipeline"]


class _SupersededError(Exception):
    """A newer invocation took over while this one was suspended."""


class UploadPipeline:
    """Single-flight pipeline turning a selected file into a previewed dataset.

    CSV files are uploaded and previewed in one go. Workbooks stop after their
    sheets were listed and continue once the user confirms a sheet.

    Every invocation draws a new token. State is only written after an await
    if the token is still the newest one, so responses of superseded
    invocations are dropped without side effects.
    """

    def __init__(
        self,
        client: BackendClient,
        state: DatasetState,
        store: LocalRecordStore,
        notifier: ErrorNotifier,
        generator: DescriptionGenerator,
        *,
        settle_delay: float | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            client: Backend client.
            state: Shared view state.
            store: Persisted record of the last committed upload.
            notifier: Auto-dismissing error notifier.
            generator: Description generator used after fresh uploads.
            settle_delay: Seconds to wait before the automatic description.
        """
        self.client = client
        self.state = state
        self.store = store
        self.notifier = notifier
        self.generator = generator
        self.settle_delay = (
            settings.description_settle_delay if settle_delay is None else settle_delay
        )
        self.placeholder = settings.placeholder_description
        self._token = 0
        self._settle_timer = Timer("description-settle")
        self._error_timer = Timer("upload-error")

    @property
    def token(self) -> int:
        """Token of the newest invocation."""
        return self._token

    # -------------------------------------------------------------------------
    # Public operations --------------------------------------------------------
    # -------------------------------------------------------------------------

    async def begin_upload(
        self, file: FileHandle, *, is_new_dataset: bool = True
    ) -> FileUpload | None:
        """Start processing a newly selected file.

        Any state of a previous file is discarded first, including its
        persisted record.

        Args:
            file: The selected file.
            is_new_dataset: Use the guidance placeholder as description
                instead of a description the user wrote earlier.

        Returns:
            The upload, previewed for CSV or waiting for sheet confirmation
            for workbooks. None if a newer action superseded this one.

        Raises:
            InvalidFormatError: If the file is neither CSV nor Excel.
            SheetEnumerationFailedError: If the workbook sheets are unavailable.
            UploadRejectedError: If the backend refused the file.
            PreviewFailedError: If the preview could not be fetched.
        """
        self.notifier.clear()
        token = self.supersede()
        self._discard_local()
        self.state.clear_resolution_flags()
        self.state.awaiting_file_selection = False
        if is_new_dataset:
            self.state.description = DatasetDescription()

        kind = file.kind
        logger.info(
            "File selected", file=file.name, kind=kind, size=file.size, token=token
        )

        if kind is FileKind.UNSUPPORTED:
            self.state.file_upload = FileUpload(file=file, status=UploadStatus.LOADING)
            raise self._record_failure(token, InvalidFormatError())

        upload = FileUpload(
            file=file,
            status=UploadStatus.LOADING,
            is_spreadsheet=kind is FileKind.EXCEL,
        )
        self.state.file_upload = upload

        try:
            if upload.is_spreadsheet:
                await self._enumerate_sheets(token, upload)
            else:
                await self._upload_and_preview(
                    token, upload, is_new_dataset=is_new_dataset
                )
        except _SupersededError:
            logger.debug("Upload superseded", file=file.name, token=token)
            return None
        return upload

    def select_sheet(self, sheet_name: str) -> None:
        """Change the pending sheet selection without contacting the backend."""
        upload = self._require_spreadsheet(sheet_name)
        upload.select_sheet(sheet_name)

    async def confirm_sheet(
        self, sheet_name: str | None = None, *, is_new_dataset: bool = True
    ) -> FilePreview | None:
        """Upload the chosen sheet and preview it.

        A newer confirmation supersedes this one; only the latest sheet ends
        up in the state.

        Args:
            sheet_name: Sheet to use, defaults to the pending selection.
            is_new_dataset: Use the guidance placeholder as description.

        Returns:
            The preview, or None if superseded.

        Raises:
            UnknownSheetError: If the sheet is not part of the workbook.
            UploadRejectedError: If the backend refused the sheet.
            PreviewFailedError: If the preview could not be fetched.
        """
        upload = self._require_spreadsheet(sheet_name)
        sheet = sheet_name or upload.selected_sheet
        if sheet is None or sheet not in upload.sheets:
            raise UnknownSheetError(str(sheet))

        self.notifier.clear()
        token = self.supersede()
        upload.select_sheet(sheet)
        upload.status = UploadStatus.LOADING
        upload.error_message = None
        logger.info("Sheet confirmed", file=upload.file.name, sheet=sheet, token=token)

        try:
            await self._upload_and_preview(
                token, upload, is_new_dataset=is_new_dataset, sheet_name=sheet
            )
        except _SupersededError:
            logger.debug("Sheet confirmation superseded", sheet=sheet, token=token)
            return None

        self.state.show_sheet_selector = False
        return self.state.file_preview

    async def preview_current(
        self, *, is_new_dataset: bool = False
    ) -> FilePreview | None:
        """Preview the current file again, keeping a user-written description.

        A file restored from the local record has no content to upload, so
        only the preview of what the backend already holds is fetched.

        Returns:
            The preview, or None if there is no file or a newer action won.
        """
        upload = self.state.file_upload
        if upload is None:
            return None

        if upload.file.is_placeholder:
            preview = await self.refresh_preview(show=True)
            if preview is not None:
                upload.succeed()
            return preview

        self.notifier.clear()
        token = self.supersede()
        upload.status = UploadStatus.LOADING
        upload.error_message = None
        sheet = upload.selected_sheet if upload.is_spreadsheet else None
        try:
            await self._upload_and_preview(
                token, upload, is_new_dataset=is_new_dataset, sheet_name=sheet
            )
        except _SupersededError:
            return None
        return self.state.file_preview

    async def refresh_preview(
        self, session_id: str | None = None, *, show: bool = False
    ) -> FilePreview | None:
        """Fetch the preview of the dataset the backend holds for a session.

        Nothing is uploaded. The result is dropped if a newer pipeline
        action started meanwhile. A description the user typed while the
        request was running is kept.

        Args:
            session_id: Session to preview, defaults to the current one.
            show: Open the preview dialog.

        Returns:
            The preview, or None if superseded.

        Raises:
            PreviewFailedError: If the backend call failed.
        """
        token = self._token
        session_id = session_id or self.state.session_id
        before = self.state.description
        try:
            payload = await self.client.fetch_preview(session_id)
        except BackendRequestError as e:
            raise PreviewFailedError(e.message) from e

        if token != self._token:
            logger.debug("Preview refresh superseded", sessionId=session_id)
            return None

        name = payload.name or self.state.description.name
        description = payload.description or ""
        self.state.file_preview = FilePreview(
            headers=payload.headers,
            rows=payload.rows,
            name=name,
            description=description,
        )
        current = self.state.description
        edited = current != before and self._is_user_text(current.description)
        if not current.is_generating and not edited:
            self.state.description = DatasetDescription(
                name=name, description=description
            )
        if show:
            self.state.show_preview = True
        return self.state.file_preview

    def clear_file(self) -> bool:
        """Forget the current file and its record.

        Returns:
            False if refused because a description is being generated.
        """
        if self.generator.is_generating:
            logger.debug("Refusing to clear file during description generation")
            return False
        self.notifier.clear()
        self.supersede()
        self._discard_local()
        return True

    def close_preview(self) -> bool:
        """Close the preview dialog.

        An upload that never reached success is discarded with it.

        Returns:
            False if refused because a description is being generated.
        """
        if self.generator.is_generating:
            logger.debug("Refusing to close preview during description generation")
            return False
        self.state.show_preview = False
        upload = self.state.file_upload
        if upload is not None and upload.status is not UploadStatus.SUCCESS:
            logger.debug("Preview closed without completed upload, resetting")
            self.supersede()
            self._discard_local()
        return True

    def dismiss_sheet_selector(self) -> None:
        """Close the sheet selector; without a preview the file is dropped."""
        self.state.show_sheet_selector = False
        if not self.state.show_preview:
            self.supersede()
            self._discard_local()

    def supersede(self) -> int:
        """Invalidate in-flight work and return the token for the next action."""
        self._token += 1
        self._settle_timer.cancel()
        self._error_timer.cancel()
        return self._token

    def cancel(self) -> None:
        """Abandon in-flight work, e.g. because the session switched."""
        self.supersede()
        upload = self.state.file_upload
        if upload is not None and upload.status is UploadStatus.LOADING:
            self.state.file_upload = None
            self.state.show_sheet_selector = False

    def discard(self) -> None:
        """Drop the current file, its preview dialog and the persisted record."""
        self._discard_local()

    async def wait_for_description(self) -> None:
        """Wait for a scheduled automatic description to finish."""
        await self._settle_timer.wait()

    async def wait_for_expiry(self) -> None:
        """Wait for a failed upload to be cleared."""
        await self._error_timer.wait()

    def aclose(self) -> None:
        """Cancel timers and invalidate in-flight work."""
        self.supersede()

    # -------------------------------------------------------------------------
    # Steps --------------------------------------------------------------------
    # -------------------------------------------------------------------------

    async def _enumerate_sheets(self, token: int, upload: FileUpload) -> None:
        await self._reset_remote(token)
        try:
            sheets = await self.client.list_excel_sheets(
                upload.file, self.state.session_id
            )
        except BackendRequestError as e:
            raise self._record_failure(
                token, SheetEnumerationFailedError(f"Excel error: {e.message}")
            ) from e

        self._ensure_current(token)
        if not sheets:
            raise self._record_failure(token, SheetEnumerationFailedError())

        upload.sheets = sheets
        upload.selected_sheet = sheets[0]
        upload.succeed()
        self.state.show_sheet_selector = True
        logger.info("Workbook sheets listed", file=upload.file.name, sheets=sheets)

    async def _upload_and_preview(
        self,
        token: int,
        upload: FileUpload,
        *,
        is_new_dataset: bool,
        sheet_name: str | None = None,
    ) -> None:
        await self._reset_remote(token)

        saved = self.state.description.description
        reuse_saved = not is_new_dataset and self._is_user_text(saved)
        sent_description = saved if reuse_saved else self.placeholder
        name = upload.file.stem
        if sheet_name is not None:
            name = f"{name} - {sheet_name}"

        try:
            response = await self.client.upload_dataset(
                upload.file,
                name=name,
                description=sent_description,
                session_id=self.state.session_id,
                spreadsheet=upload.is_spreadsheet,
                sheet_name=sheet_name,
            )
        except BackendRequestError as e:
            raise self._record_failure(token, UploadRejectedError(e.message)) from e

        self._ensure_current(token)
        if response.dataset_upload_id is not None:
            upload.dataset_upload_id = response.dataset_upload_id

        # The upload may hand out a new session; it is the fresher one
        preview_session = response.session_id or self.state.session_id
        try:
            payload = await self.client.fetch_preview(preview_session)
        except BackendRequestError as e:
            error = (
                PreviewFailedError(e.message)
                if sheet_name is None
                else SheetPreviewFailedError(e.message)
            )
            raise self._record_failure(token, error) from e

        self._ensure_current(token)
        current = self.state.description.description
        if is_new_dataset:
            description = self.placeholder
        elif self._is_user_text(current):
            description = current
        else:
            description = payload.description or sent_description

        preview_name = payload.name or name
        self.state.file_preview = FilePreview(
            headers=payload.headers,
            rows=payload.rows,
            name=preview_name,
            description=description,
        )
        self.state.description = DatasetDescription(
            name=preview_name, description=description
        )
        self.state.adopt_session(response.session_id)
        self.state.show_preview = True
        upload.succeed()
        logger.info(
            "Dataset previewed",
            file=upload.file.name,
            sheet=sheet_name,
            rows=len(payload.rows),
            sessionId=self.state.session_id,
        )

        if is_new_dataset and description == self.placeholder:
            self._schedule_description(token)

    async def _reset_remote(self, token: int) -> None:
        session_id = self.state.session_id
        if session_id:
            try:
                await self.client.reset_session(session_id)
            except BackendRequestError as e:
                # The next step may still succeed against the stale session
                logger.warning(
                    "Failed to reset session before upload",
                    sessionId=session_id,
                    error=e.message,
                )
        self._ensure_current(token)

    def _schedule_description(self, token: int) -> None:
        async def generate() -> None:
            if token != self._token:
                return
            try:
                await self.generator.generate()
            except GenerationFailedError as e:
                self.notifier.notify_error(e)

        self._settle_timer.start(self.settle_delay, generate)

    # -------------------------------------------------------------------------
    # Utility ------------------------------------------------------------------
    # -------------------------------------------------------------------------

    def _record_failure(self, token: int, error: AppError) -> AppError:
        """Put the upload into the error state and schedule its removal.

        The failed upload is cleared after the notification delay even if the
        notification itself was replaced or dismissed earlier.
        """
        self._ensure_current(token)
        upload = self.state.file_upload
        if upload is not None:
            upload.fail(error.message)

        def expire() -> None:
            if token == self._token:
                self._discard_local()

        self.notifier.notify(error.title, error.message)
        self._error_timer.start(self.notifier.delay, expire)
        logger.warning(
            "Upload pipeline failed",
            error=error.error_code,
            detail=error.message,
            token=token,
        )
        return error

    def _ensure_current(self, token: int) -> None:
        if token != self._token:
            raise _SupersededError

    def _require_spreadsheet(self, sheet_name: str | None) -> FileUpload:
        upload = self.state.file_upload
        if upload is None or not upload.is_spreadsheet:
            raise UnknownSheetError(str(sheet_name))
        if sheet_name is not None and sheet_name not in upload.sheets:
            raise UnknownSheetError(sheet_name)
        return upload

    def _discard_local(self) -> None:
        self.state.file_upload = None
        self.state.file_preview = None
        self.state.show_preview = False
        self.state.show_sheet_selector = False
        self.store.clear()

    def _is_user_text(self, text: str) -> bool:
        return bool(text) and text not in {
            PREVIEW_DESCRIPTION,
            GENERATING_DESCRIPTION,
            self.placeholder,
        }

