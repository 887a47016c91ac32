"""Notification module for datasession."""

from .notifier import ErrorNotification, ErrorNotifier

__all__ = ["ErrorNotification", "ErrorNotifier"]
