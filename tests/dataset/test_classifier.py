"""Tests for the file classifier and file handle helpers."""
# ruff: noqa: S101

from pathlib import Path

import pytest

from datasession.dataset.file_format import FileKind, classify_file
from datasession.dataset.schemas import FileHandle, FileUpload

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.mark.classifier
@pytest.mark.parametrize(
    ("name", "content_type", "expected"),
    [
        ("sales.csv", "", FileKind.CSV),
        ("SALES.CSV", "application/octet-stream", FileKind.CSV),
        ("book.xlsx", "", FileKind.EXCEL),
        ("legacy.XLS", "", FileKind.EXCEL),
        ("export", "text/csv", FileKind.CSV),
        ("export", "application/csv", FileKind.CSV),
        ("export.data", XLSX_TYPE, FileKind.EXCEL),
        ("export.data", "application/vnd.ms-excel", FileKind.EXCEL),
        ("export", "text/csv; charset=utf-8", FileKind.CSV),
    ],
)
def test_supported_files(name: str, content_type: str, expected: FileKind) -> None:
    """Extension or declared type decides the kind."""
    assert classify_file(name, content_type) is expected


@pytest.mark.classifier
@pytest.mark.parametrize(
    ("name", "content_type"),
    [
        ("report.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("archive.zip", ""),
        ("no_extension", None),
        ("data.json", "application/json"),
    ],
)
def test_unsupported_files(name: str, content_type: str | None) -> None:
    """Everything else is unsupported, including an unknown empty type."""
    assert classify_file(name, content_type) is FileKind.UNSUPPORTED


@pytest.mark.classifier
def test_extension_wins_over_declared_type() -> None:
    """A CSV extension is trusted even if the declared type says otherwise."""
    assert classify_file("table.csv", "application/pdf") is FileKind.CSV


@pytest.mark.classifier
def test_ghost_handle_is_placeholder() -> None:
    """Handles rebuilt from metadata carry no content."""
    ghost = FileHandle.ghost("sales.csv", last_modified=123)

    assert ghost.is_placeholder
    assert ghost.size == 0
    assert ghost.kind is FileKind.CSV


@pytest.mark.classifier
def test_empty_handle_without_mtime_is_placeholder() -> None:
    """A zero-byte handle without modification time is treated as a ghost."""
    assert FileHandle(name="empty.csv").is_placeholder
    assert not FileHandle(name="empty.csv", last_modified=1).is_placeholder


@pytest.mark.classifier
def test_from_path_reads_content(tmp_path: Path) -> None:
    """Handles built from disk carry bytes, type and modification time."""
    path = tmp_path / "sales.csv"
    path.write_text("region,revenue\nnorth,10\n", encoding="utf-8")

    handle = FileHandle.from_path(path)

    assert handle.content_type == "text/csv"
    assert handle.size == path.stat().st_size
    assert handle.last_modified is not None
    assert handle.stem == "sales"
    assert not handle.is_placeholder


@pytest.mark.classifier
def test_selected_sheet_must_be_listed() -> None:
    """A selected sheet outside the sheet list is rejected."""
    file = FileHandle.ghost("book.xlsx", content_type=XLSX_TYPE)

    with pytest.raises(ValueError, match="Sheet2"):
        FileUpload(file=file, sheets=["Sheet1"], selected_sheet="Sheet2")

    upload = FileUpload(file=file, sheets=["Sheet1", "Sheet2"], selected_sheet="Sheet1")
    with pytest.raises(ValueError, match="Sheet3"):
        upload.select_sheet("Sheet3")
    upload.select_sheet("Sheet2")
    assert upload.selected_sheet == "Sheet2"
