"""Switching the session back to the backend's built-in dataset."""

from loguru import logger

from datasession.api.client import BackendClient
from datasession.api.exceptions import BackendRequestError
from datasession.config import settings
from datasession.dataset.schemas import DatasetDescription, FilePreview
from datasession.record.store import LocalRecordStore
from datasession.state import DatasetState
from datasession.upload.pipeline import UploadPipeline

__all__ = ["DefaultDatasetLoader"]


class DefaultDatasetLoader:
    """Loads the default dataset into the state, with or without preview."""

    def __init__(
        self,
        client: BackendClient,
        state: DatasetState,
        store: LocalRecordStore,
        pipeline: UploadPipeline,
    ) -> None:
        """Initialize the loader.

        Args:
            client: Backend client.
            state: Shared view state.
            store: Persisted record, cleared once the default is active.
            pipeline: Upload pipeline, superseded by the switch.
        """
        self.client = client
        self.state = state
        self.store = store
        self.pipeline = pipeline

    async def preview_default(self) -> bool:
        """Switch to the default dataset and open its preview."""
        return await self._load(show=True)

    async def load_default_silently(self) -> bool:
        """Switch to the default dataset without opening any dialog."""
        return await self._load(show=False)

    async def _load(self, *, show: bool) -> bool:
        token = self.pipeline.supersede()
        session_id = self.state.session_id
        if session_id:
            try:
                await self.client.reset_session(session_id)
            except BackendRequestError as e:
                logger.warning(
                    "Failed to reset session", sessionId=session_id, error=e.message
                )

        try:
            payload = await self.client.fetch_default_dataset(session_id)
        except BackendRequestError as e:
            logger.warning("Failed to load default dataset", error=e.message)
            return False

        if token != self.pipeline.token:
            logger.debug("Default dataset load superseded")
            return False

        name = payload.name or settings.default_dataset_name
        description = payload.description or settings.default_dataset_description

        self.state.file_upload = None
        self.state.show_sheet_selector = False
        self.store.clear()
        self.state.file_preview = FilePreview(
            headers=payload.headers,
            rows=payload.rows,
            name=name,
            description=description,
        )
        self.state.description = DatasetDescription(name=name, description=description)
        self.state.adopt_session(payload.session_id)
        self.state.clear_resolution_flags()
        self.state.awaiting_file_selection = False
        if show:
            self.state.show_preview = True

        logger.info("Default dataset loaded", name=name, preview=show)
        return True
