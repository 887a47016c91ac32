"""Auto-dismissing error notifications."""

from loguru import logger
from pydantic import BaseModel

from datasession.common.app_error import AppError
from datasession.config import settings
from datasession.utils.timer import Timer

__all__ = ["ErrorNotification", "ErrorNotifier"]


class ErrorNotification(BaseModel):
    """Uniform error shape shown to the user."""

    message: str
    details: str | None = None


class ErrorNotifier:
    """Holds at most one error notification and dismisses it after a delay.

    Showing a new notification or clearing the current one cancels a pending
    dismissal.
    """

    def __init__(self, delay: float | None = None) -> None:
        """Initialize the notifier.

        Args:
            delay: Seconds before a notification is dismissed automatically.
        """
        self.delay = settings.error_dismiss_delay if delay is None else delay
        self.current: ErrorNotification | None = None
        self._timer = Timer("error-dismiss")

    @property
    def dismiss_pending(self) -> bool:
        """Whether an automatic dismissal is scheduled."""
        return self._timer.pending

    def notify(
        self,
        message: str,
        details: str | None = None,
        *,
        auto_dismiss: bool = True,
    ) -> ErrorNotification:
        """Show a notification, replacing the current one."""
        self._timer.cancel()
        self.current = ErrorNotification(message=message, details=details)
        logger.info("Error notification", message=message, details=details)

        if auto_dismiss:
            self._timer.start(self.delay, self._expire)
        return self.current

    def notify_error(self, error: AppError) -> ErrorNotification:
        """Show a notification for an application error."""
        return self.notify(
            error.title,
            error.message,
            auto_dismiss=error.auto_dismiss,
        )

    def clear(self) -> None:
        """Remove the notification and cancel its dismissal."""
        self._timer.cancel()
        self.current = None

    async def wait(self) -> None:
        """Wait for a pending dismissal to run."""
        await self._timer.wait()

    def _expire(self) -> None:
        self.current = None
        logger.debug("Error notification dismissed")
