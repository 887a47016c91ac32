"""Session module for datasession.

Keeps the locally remembered dataset in line with the server session:
reconciliation on session and credit events, mismatch resolution and the
switch back to the built-in default dataset.
"""

from .default_dataset import DefaultDatasetLoader
from .events import CreditsChanged, EventDispatcher, SessionChanged, SessionEvent
from .reconciler import ReconcileCase, SessionReconciler

__all__ = [
    "CreditsChanged",
    "DefaultDatasetLoader",
    "EventDispatcher",
    "ReconcileCase",
    "SessionChanged",
    "SessionEvent",
    "SessionReconciler",
]
