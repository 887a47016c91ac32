"""Shared constants, file builders and helpers for the tests."""

import asyncio
import json
from collections.abc import Callable

import pandas as pd

from datasession.dataset.schemas import FileHandle

__all__ = [
    "BANNER_DELAY",
    "BASE_URL",
    "ERROR_DELAY",
    "SESSION_ID",
    "SETTLE_DELAY",
    "csv_file",
    "eventually",
    "workbook_file",
]

BASE_URL = "http://testserver"
SESSION_ID = "session-1"

ERROR_DELAY = 0.05
BANNER_DELAY = 0.05
SETTLE_DELAY = 0.01

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MODIFIED_AT = 1_717_000_000_000


def csv_file(name: str = "sales.csv", rows: int = 10) -> FileHandle:
    """Build a CSV file handle with ``rows`` data rows.

    Args:
        name: File name.
        rows: Number of data rows.

    Returns:
        FileHandle with real content.
    """
    frame = pd.DataFrame({
        "region": [f"region-{i}" for i in range(rows)],
        "revenue": [100 * i for i in range(rows)],
    })
    return FileHandle(
        name=name,
        content=frame.to_csv(index=False).encode(),
        content_type="text/csv",
        last_modified=MODIFIED_AT,
    )


def workbook_file(
    name: str = "book.xlsx", sheets: dict[str, list[str]] | None = None
) -> FileHandle:
    """Build a workbook handle understood by the fake backend.

    Args:
        name: File name.
        sheets: Sheet names mapped to their headers.

    Returns:
        FileHandle whose content lists the sheets with two rows each.
    """
    if sheets is None:
        sheets = {"Sheet1": ["id", "amount"], "Sheet2": ["country", "population"]}
    workbook = {
        sheet: {"headers": headers, "rows": [[f"{sheet}-{i}", i] for i in range(2)]}
        for sheet, headers in sheets.items()
    }
    return FileHandle(
        name=name,
        content=json.dumps(workbook).encode(),
        content_type=XLSX_TYPE,
        last_modified=MODIFIED_AT,
    )


async def eventually(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate`` holds.

    Raises:
        TimeoutError: If the predicate still fails after ``timeout`` seconds.
    """
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)
