"""Discrete events that trigger a reconciliation."""

from loguru import logger
from pydantic import BaseModel, ConfigDict

from datasession.state import DatasetState
from datasession.upload.pipeline import UploadPipeline

from .reconciler import ReconcileCase, SessionReconciler

__all__ = ["CreditsChanged", "EventDispatcher", "SessionChanged", "SessionEvent"]


class SessionChanged(BaseModel):
    """The host switched to another conversational session."""

    model_config = ConfigDict(frozen=True)

    session_id: str | None


class CreditsChanged(BaseModel):
    """The host's credit balance changed, which may follow a server reset."""

    model_config = ConfigDict(frozen=True)

    session_id: str | None = None


SessionEvent = SessionChanged | CreditsChanged


class EventDispatcher:
    """Routes host events into the reconciler."""

    def __init__(
        self,
        state: DatasetState,
        pipeline: UploadPipeline,
        reconciler: SessionReconciler,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            state: Shared view state.
            pipeline: Upload pipeline, superseded when the session switches.
            reconciler: Reconciler the events are routed to.
        """
        self.state = state
        self.pipeline = pipeline
        self.reconciler = reconciler

    async def dispatch(self, event: SessionEvent) -> ReconcileCase:
        """Handle one event and reconcile if needed."""
        logger.debug("Session event", event=type(event).__name__)
        match event:
            case SessionChanged(session_id=session_id):
                if session_id != self.state.session_id:
                    self.pipeline.cancel()
                    self.state.session_id = session_id
                    self.state.clear_resolution_flags()
                return await self.reconciler.reconcile(session_id)
            case CreditsChanged(session_id=session_id):
                return await self.reconciler.reconcile(
                    session_id or self.state.session_id
                )
        return ReconcileCase.SKIPPED
