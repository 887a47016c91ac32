"""Backend-generated dataset descriptions."""

import asyncio

from loguru import logger

from datasession.api.client import BackendClient
from datasession.api.exceptions import BackendRequestError
from datasession.dataset.constants import GENERATING_DESCRIPTION, PREVIEW_DESCRIPTION
from datasession.state import DatasetState

from .exceptions import GenerationFailedError

__all__ = ["DescriptionGenerator"]


class DescriptionGenerator:
    """Asks the backend to describe the session dataset.

    While a generation runs the description holds the generating sentinel and
    ``is_generating`` is set; destructive actions (closing the detail dialog,
    clearing the file) consult it and refuse to run. Whatever the user types
    during a generation is never overwritten.
    """

    def __init__(self, client: BackendClient, state: DatasetState) -> None:
        """Initialize the generator.

        Args:
            client: Backend client.
            state: Shared view state holding the description.
        """
        self.client = client
        self.state = state
        self._generating = False

    @property
    def is_generating(self) -> bool:
        """Whether a generation is in flight."""
        return self._generating

    async def generate(self, session_id: str | None = None) -> str | None:
        """Generate a description for the dataset of a session.

        Args:
            session_id: Session whose dataset is described, defaults to the
                current one.

        Returns:
            The description now in place, or None if nothing was generated
            because there is no session or a generation is already running.

        Raises:
            GenerationFailedError: If the backend call failed.
        """
        session_id = session_id or self.state.session_id
        if not session_id:
            logger.debug("No session, skipping description generation")
            return None
        if self._generating:
            logger.debug("Description generation already running")
            return None

        current = self.state.description.description
        existing = bool(current) and current not in {
            GENERATING_DESCRIPTION,
            PREVIEW_DESCRIPTION,
        }

        self._generating = True
        self.state.edit_description(description=GENERATING_DESCRIPTION)
        logger.info("Generating dataset description", sessionId=session_id)
        try:
            text = await self.client.create_dataset_description(
                session_id, existing_description=existing
            )
        except BackendRequestError as e:
            if self.state.description.is_generating:
                self.state.edit_description(description="")
            logger.warning("Description generation failed", error=e.message)
            raise GenerationFailedError(e.message) from e
        except asyncio.CancelledError:
            if self.state.description.is_generating:
                self.state.edit_description(description="")
            raise
        finally:
            self._generating = False

        if self.state.description.is_generating:
            self.state.edit_description(description=text)
        else:
            logger.debug("Description edited during generation, keeping user text")
        return self.state.description.description
