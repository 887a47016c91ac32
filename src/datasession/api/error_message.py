"""Flatten the error shapes the backend returns into one readable string."""

from typing import Any

import httpx

from datasession.config.errors import ErrorNames

__all__ = ["extract_error_message", "flatten_detail"]


def flatten_detail(detail: Any) -> str:  # noqa: ANN401
    """Turn a ``detail`` field into a single sentence.

    Args:
        detail: Either a plain string, a list of validation error objects
            (``{"msg": ...}`` or ``{"message": ...}``) or an object mapping
            field names to problems.

    Returns:
        The messages joined with ``". "``.
    """
    if isinstance(detail, str):
        return detail

    if isinstance(detail, list):
        parts = []
        for item in detail:
            if isinstance(item, dict):
                parts.append(str(item.get("msg") or item.get("message") or item))
            else:
                parts.append(str(item))
        return ". ".join(parts)

    if isinstance(detail, dict):
        return ". ".join(f"{key}: {value}" for key, value in detail.items())

    return str(detail)


def extract_error_message(response: httpx.Response) -> str:
    """Build the user-facing message for a failed backend response.

    Args:
        response: The non-successful response.

    Returns:
        A fixed text for size and media type rejections, otherwise the
        flattened ``detail``, then ``message`` or ``error``, then the body.
    """
    if response.status_code == httpx.codes.REQUEST_ENTITY_TOO_LARGE:
        return ErrorNames.FILE_TOO_LARGE
    if response.status_code == httpx.codes.UNSUPPORTED_MEDIA_TYPE:
        return ErrorNames.INVALID_FILE_TYPE

    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        detail = payload.get("detail")
        if detail:
            return flatten_detail(detail)
        for key in ("message", "error"):
            value = payload.get(key)
            if value:
                return str(value)

    text = response.text.strip()
    if text:
        return text
    return f"Request failed with status code {response.status_code}"
