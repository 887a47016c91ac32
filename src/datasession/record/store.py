"""Key/value file store holding the local dataset record across restarts."""

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from datasession.config import settings

from .models import LocalDatasetRecord

__all__ = ["LocalRecordStore"]


class LocalRecordStore:
    """Single shared slot for the last committed upload.

    The backing file is a JSON object of string keys to JSON-encoded string
    values, mirroring browser local storage. Writes are last-writer-wins.
    """

    def __init__(self, path: Path | None = None, key: str | None = None) -> None:
        """Initialize the store.

        Args:
            path: JSON file backing the store.
            key: Key under which the record is kept.
        """
        self.path = path or settings.record_path
        self.key = key or settings.record_key

    def load(self) -> LocalDatasetRecord | None:
        """Read the record, dropping it if it cannot be parsed."""
        raw = self._read().get(self.key)
        if raw is None:
            return None

        try:
            return LocalDatasetRecord.model_validate_json(raw)
        except (ValidationError, TypeError) as e:
            logger.warning("Dropping unreadable dataset record", error=str(e))
            self.clear()
            return None

    def save(self, record: LocalDatasetRecord) -> None:
        """Overwrite the record."""
        data = self._read()
        data[self.key] = record.model_dump_json(by_alias=True, exclude_none=True)
        self._write(data)
        logger.debug("Dataset record saved", name=record.name)

    def clear(self) -> None:
        """Delete the record if present."""
        data = self._read()
        if data.pop(self.key, None) is not None:
            self._write(data)
            logger.debug("Dataset record cleared")

    def exists(self) -> bool:
        """Whether a record is stored, readable or not."""
        return self.key in self._read()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with Path.open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read local storage", path=self.path, error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with Path.open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
