"""Async client for the dataset backend."""

from types import TracebackType
from typing import Any, Self, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from datasession.config import settings
from datasession.dataset.schemas import FileHandle

from .error_message import extract_error_message
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

__all__ = ["BackendClient"]

T = TypeVar("T", bound=BaseModel)


class BackendClient:
    """Thin async wrapper over the backend endpoints the dataset flow uses.

    Every call carries the session identity in the session header when one is
    known. Failed responses are turned into ``BackendRequestError`` with a
    flattened, human-readable message; unreachable servers into
    ``BackendUnavailableError``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend root URL, defaults to the configured one.
            timeout: Request timeout in seconds.
            http_client: Preconfigured client, e.g. bound to a test transport.
                The caller keeps ownership of a client passed in here.
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.api_timeout,
        )

    async def __aenter__(self) -> Self:
        """Enter the async context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the underlying HTTP client."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    # -------------------------------------------------------------------------
    # Session ------------------------------------------------------------------
    # -------------------------------------------------------------------------

    async def reset_session(
        self,
        session_id: str | None,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> str | None:
        """Clear the dataset state of a session, or set its default metadata.

        Args:
            session_id: Session to reset.
            name: Dataset name to store with the default dataset.
            description: Dataset description to store with the default dataset.

        Returns:
            The session ID the backend answered with, if any.
        """
        body = None
        if name is not None or description is not None:
            body = {"name": name, "description": description}

        response = await self._request(
            "POST", "/reset-session", session_id=session_id, json=body
        )
        try:
            payload = response.json()
        except ValueError:
            return None
        return payload.get("session_id") if isinstance(payload, dict) else None

    async def get_session_info(self, session_id: str) -> SessionInfo:
        """Read which dataset the backend considers active for a session."""
        response = await self._request(
            "GET", "/api/session-info", session_id=session_id
        )
        return self._parse(response, SessionInfo)

    # -------------------------------------------------------------------------
    # Upload -------------------------------------------------------------------
    # -------------------------------------------------------------------------

    async def list_excel_sheets(
        self, file: FileHandle, session_id: str | None = None
    ) -> list[str]:
        """Ask the backend for the sheet names of a workbook."""
        response = await self._request(
            "POST",
            "/api/excel-sheets",
            session_id=session_id,
            files={"file": self._file_part(file)},
        )
        payload = self._json(response)
        sheets = payload.get("sheets") if isinstance(payload, dict) else None
        return [str(sheet) for sheet in sheets or []]

    async def upload_dataset(
        self,
        file: FileHandle,
        *,
        name: str,
        description: str,
        session_id: str | None = None,
        spreadsheet: bool = False,
        sheet_name: str | None = None,
    ) -> UploadResponse:
        """Upload a dataset file together with its metadata.

        Args:
            file: File to send.
            name: Dataset name.
            description: Dataset description.
            session_id: Session the dataset is attached to.
            spreadsheet: Use the workbook endpoint instead of the CSV one.
            sheet_name: Sheet to convert, workbooks only.

        Returns:
            UploadResponse with the possibly new session ID and upload ID.
        """
        data = {"name": name, "description": description}
        if sheet_name is not None:
            data["sheet_name"] = sheet_name

        path = "/upload_excel" if spreadsheet else "/upload_dataframe"
        response = await self._request(
            "POST",
            path,
            session_id=session_id,
            force_refresh=True,
            data=data,
            files={"file": self._file_part(file)},
        )
        upload = self._parse(response, UploadResponse)
        logger.debug(
            "Dataset uploaded",
            endpoint=path,
            sessionId=upload.session_id,
            uploadId=upload.dataset_upload_id,
        )
        return upload

    async def fetch_preview(self, session_id: str | None) -> DatasetPayload:
        """Fetch headers, sample rows, name and description of the session dataset."""
        response = await self._request(
            "POST", "/api/preview-csv", session_id=session_id
        )
        return self._parse(response, DatasetPayload)

    async def fetch_default_dataset(
        self, session_id: str | None = None
    ) -> DefaultDatasetResponse:
        """Fetch the backend's built-in default dataset."""
        response = await self._request(
            "GET", "/api/default-dataset", session_id=session_id
        )
        return self._parse(response, DefaultDatasetResponse)

    async def create_dataset_description(
        self, session_id: str, *, existing_description: bool
    ) -> str:
        """Let the backend summarize the session dataset.

        Args:
            session_id: Session whose dataset is described.
            existing_description: Whether the user already wrote something.

        Returns:
            The generated description, empty when the backend returned none.
        """
        response = await self._request(
            "POST",
            "/create-dataset-description",
            json={
                "sessionId": session_id,
                "existingDescription": existing_description,
            },
        )
        payload = self._json(response)
        if not isinstance(payload, dict):
            return ""
        return str(payload.get("description") or "")

    async def get_upload_stats(self, upload_id: int | str) -> UploadStats:
        """Look up processing statistics of one upload."""
        response = await self._request(
            "GET", "/api/dataset-uploads", params={"limit": 1}
        )
        payload = self._json(response)
        uploads = payload.get("uploads", []) if isinstance(payload, dict) else payload

        for upload in uploads or []:
            if isinstance(upload, dict) and str(upload.get("upload_id")) == str(
                upload_id
            ):
                try:
                    return UploadStats.model_validate(upload)
                except ValidationError as e:
                    raise BackendRequestError(
                        f"Unexpected upload statistics: {e.error_count()} errors"
                    ) from e
        raise UploadStatsNotFoundError(upload_id)

    # -------------------------------------------------------------------------
    # Utility ------------------------------------------------------------------
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        session_id: str | None = None,
        force_refresh: bool = False,
        **kwargs: Any,  # noqa: ANN401
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        if session_id:
            headers[settings.session_header] = session_id
        if force_refresh:
            headers["X-Force-Refresh"] = "true"

        try:
            response = await self._http.request(
                method, path, headers=headers, **kwargs
            )
        except httpx.TimeoutException as e:
            raise BackendRequestError(f"Request to {path} timed out") from e
        except httpx.RequestError as e:
            logger.warning("Backend unreachable", path=path, error=str(e))
            raise BackendUnavailableError(self.base_url) from e

        if response.is_error:
            message = extract_error_message(response)
            logger.debug(
                "Backend error response",
                path=path,
                status=response.status_code,
                detail=message,
            )
            raise BackendRequestError(message, status_code=response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:  # noqa: ANN401
        try:
            return response.json()
        except ValueError as e:
            raise BackendRequestError(
                f"Unexpected response from {response.request.url.path}"
            ) from e

    @classmethod
    def _parse(cls, response: httpx.Response, model: type[T]) -> T:
        try:
            return model.model_validate(cls._json(response))
        except ValidationError as e:
            raise BackendRequestError(
                f"Unexpected response from {response.request.url.path}"
            ) from e

    @staticmethod
    def _file_part(file: FileHandle) -> tuple[str, bytes, str]:
        content_type = file.content_type or "application/octet-stream"
        return (file.name, file.content, content_type)
