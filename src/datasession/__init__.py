"""Attach tabular datasets to conversational analytics sessions.

The package keeps a client's notion of the active dataset in line with the
backend session: it classifies selected files, uploads and previews them
(including workbook sheet selection), lets the backend describe them,
commits the final metadata and reconciles the locally remembered upload with
the server after reloads and session switches.

``DatasetSessionController`` wires all parts together for a host UI.
"""

from datasession.config import config_logger, settings
from datasession.controller import DatasetSessionController
from datasession.dataset import FileHandle, FileKind, classify_file
from datasession.session import CreditsChanged, ReconcileCase, SessionChanged
from datasession.state import DatasetState

__all__ = [
    "CreditsChanged",
    "DatasetSessionController",
    "DatasetState",
    "FileHandle",
    "FileKind",
    "ReconcileCase",
    "SessionChanged",
    "classify_file",
    "config_logger",
    "settings",
]
