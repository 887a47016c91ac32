"""Commit module for datasession.

Finalizes the previewed dataset: validates name and description, uploads the
file with its final metadata (or attaches the metadata to the default
dataset) and persists the local record of what was committed.
"""

from .controller import CommitController
from .exceptions import CommitFailedError, MissingMetadataError, StaleHandleError

__all__ = [
    "CommitController",
    "CommitFailedError",
    "MissingMetadataError",
    "StaleHandleError",
]
