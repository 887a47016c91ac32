"""Backend API module for datasession.

Wraps the dataset backend endpoints (session reset and info, sheet listing,
upload, preview, default dataset, description generation and upload
statistics) behind an ``httpx`` based async client.
"""

from .client import BackendClient
from .error_message import extract_error_message, flatten_detail
from .exceptions import (
    BackendRequestError,
    BackendUnavailableError,
    UploadStatsNotFoundError,
)
from .schemas import (
    DatasetPayload,
    DefaultDatasetResponse,
    SessionInfo,
    UploadResponse,
    UploadStats,
)

__all__ = [
    "BackendClient",
    "BackendRequestError",
    "BackendUnavailableError",
    "DatasetPayload",
    "DefaultDatasetResponse",
    "SessionInfo",
    "UploadResponse",
    "UploadStats",
    "UploadStatsNotFoundError",
    "extract_error_message",
    "flatten_detail",
]
