"""Local record module for datasession.

Persists the identity of the last committed upload so a restarted client can
show which dataset is active without uploading it again.
"""

from .models import LocalDatasetRecord
from .store import LocalRecordStore

__all__ = ["LocalDatasetRecord", "LocalRecordStore"]
