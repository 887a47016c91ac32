"""Tests for session reconciliation."""
# ruff: noqa: S101

import asyncio

import pytest

from datasession.common.upload_status import UploadStatus
from datasession.dataset.schemas import FileHandle, FileUpload
from datasession.record.models import LocalDatasetRecord
from datasession.record.store import LocalRecordStore
from datasession.session.events import CreditsChanged, EventDispatcher, SessionChanged
from datasession.session.reconciler import ReconcileCase, SessionReconciler
from datasession.state import DatasetState
from datasession.upload.pipeline import UploadPipeline
from tests.fake_backend import FakeBackend
from tests.utils import SESSION_ID, csv_file, eventually


@pytest.mark.reconcile
async def test_custom_dataset_with_record_is_restored(
    reconciler: SessionReconciler,
    state: DatasetState,
    store: LocalRecordStore,
    backend: FakeBackend,
) -> None:
    """Case A: the record is restored as a ghost and the preview refreshed."""
    backend.mark_custom(SESSION_ID, name="sales", description="Sales figures")
    store.save(LocalDatasetRecord(name="sales.csv", modified_at=7))

    case = await reconciler.reconcile()
    await reconciler.join()

    assert case is ReconcileCase.RESTORED
    upload = state.file_upload
    assert upload is not None
    assert upload.status is UploadStatus.SUCCESS
    assert upload.file.is_placeholder
    assert upload.file.name == "sales.csv"
    assert state.file_preview is not None
    assert state.file_preview.headers == ["region", "revenue"]
    assert state.description.description == "Sales figures"
    assert not state.mismatch
    assert not state.show_preview


@pytest.mark.reconcile
async def test_restore_keeps_upload_in_memory(
    reconciler: SessionReconciler,
    state: DatasetState,
    store: LocalRecordStore,
    backend: FakeBackend,
) -> None:
    """Case A keeps a real in-memory upload of the recorded file."""
    backend.mark_custom(SESSION_ID)
    upload = FileUpload(file=csv_file("sales.csv"), status=UploadStatus.SUCCESS)
    state.file_upload = upload
    store.save(LocalDatasetRecord.from_upload(upload))

    assert await reconciler.reconcile() is ReconcileCase.RESTORED
    await reconciler.join()

    assert state.file_upload is upload
    assert not state.file_upload.file.is_placeholder


@pytest.mark.reconcile
async def test_failed_refresh_keeps_restored_upload(
    reconciler: SessionReconciler,
    state: DatasetState,
    store: LocalRecordStore,
    backend: FakeBackend,
) -> None:
    """Case A never reverts to an error when the refresh fails."""
    backend.mark_custom(SESSION_ID)
    backend.fail("/api/preview-csv")
    store.save(LocalDatasetRecord(name="sales.csv"))

    assert await reconciler.reconcile() is ReconcileCase.RESTORED
    await reconciler.join()

    assert state.file_upload is not None
    assert state.file_upload.status is UploadStatus.SUCCESS
    assert state.file_preview is None


@pytest.mark.reconcile
async def test_unknown_custom_dataset_is_synthesized(
    reconciler: SessionReconciler, state: DatasetState, backend: FakeBackend
) -> None:
    """Case B: a custom dataset nobody knows about gets a display-only file."""
    backend.mark_custom(SESSION_ID, name="Inventory", description="Stock levels")

    case = await reconciler.reconcile()

    assert case is ReconcileCase.UNKNOWN_CUSTOM
    assert state.file_upload is not None
    assert state.file_upload.file.name == "Inventory.csv"
    assert state.file_upload.file.is_placeholder
    assert state.description.name == "Inventory"
    assert state.description.description == "Stock levels"
    assert state.mismatch


@pytest.mark.reconcile
async def test_unnamed_custom_dataset(
    reconciler: SessionReconciler, state: DatasetState, backend: FakeBackend
) -> None:
    """Case B falls back to a generic name."""
    backend.mark_custom(SESSION_ID, name=None, description=None)

    await reconciler.reconcile()

    assert state.file_upload is not None
    assert state.file_upload.file.name == "Custom Dataset.csv"
    assert state.description.description == ""


@pytest.mark.reconcile
async def test_server_reset_prompts_user(
    reconciler: SessionReconciler, state: DatasetState
) -> None:
    """Case C: the server lost the custom dataset the client shows."""
    state.file_upload = FileUpload(file=csv_file(), status=UploadStatus.SUCCESS)

    case = await reconciler.reconcile()

    assert case is ReconcileCase.SERVER_RESET
    assert state.mismatch
    assert state.show_reset_prompt
    assert state.file_upload is not None


@pytest.mark.reconcile
async def test_default_session_drops_record(
    reconciler: SessionReconciler, state: DatasetState, store: LocalRecordStore
) -> None:
    """Case D: without a custom dataset the record goes away."""
    store.save(LocalDatasetRecord(name="sales.csv"))
    state.file_upload = FileUpload(
        file=csv_file(), status=UploadStatus.ERROR, error_message="failed"
    )

    case = await reconciler.reconcile()

    assert case is ReconcileCase.DEFAULT
    assert store.load() is None
    assert state.file_upload is None
    assert not state.mismatch


@pytest.mark.reconcile
async def test_default_session_keeps_loading_upload(
    reconciler: SessionReconciler, state: DatasetState
) -> None:
    """Case D leaves an upload in flight alone."""
    state.file_upload = FileUpload(file=csv_file(), status=UploadStatus.LOADING)

    assert await reconciler.reconcile() is ReconcileCase.DEFAULT
    assert state.file_upload is not None


@pytest.mark.reconcile
async def test_session_info_failure_changes_nothing(
    reconciler: SessionReconciler,
    state: DatasetState,
    store: LocalRecordStore,
    backend: FakeBackend,
) -> None:
    """A failing session check is logged and leaves the state as it was."""
    backend.fail("/api/session-info")
    store.save(LocalDatasetRecord(name="sales.csv"))

    assert await reconciler.reconcile() is ReconcileCase.FAILED
    assert store.load() is not None
    assert state.file_upload is None


@pytest.mark.reconcile
async def test_reconcile_is_not_reentrant(
    reconciler: SessionReconciler, backend: FakeBackend
) -> None:
    """A second trigger for the same session while one runs is skipped."""
    results = await asyncio.gather(reconciler.reconcile(), reconciler.reconcile())

    assert ReconcileCase.SKIPPED in results
    assert backend.paths().count("/api/session-info") == 1


@pytest.mark.reconcile
async def test_keep_custom_with_real_file_repreviews(
    reconciler: SessionReconciler,
    pipeline: UploadPipeline,
    state: DatasetState,
    backend: FakeBackend,
) -> None:
    """Keeping a real file uploads it again and shows its preview."""
    await pipeline.begin_upload(csv_file())
    await pipeline.wait_for_description()
    backend.sessions.clear()
    assert await reconciler.reconcile() is ReconcileCase.SERVER_RESET

    assert await reconciler.resolve(keep_custom=True)

    assert not state.mismatch
    assert not state.show_reset_prompt
    assert state.file_upload is not None
    assert state.file_upload.status is UploadStatus.SUCCESS
    assert state.show_preview
    assert backend.session(state.session_id)["custom"]


@pytest.mark.reconcile
async def test_keep_custom_with_ghost_asks_for_file(
    reconciler: SessionReconciler,
    state: DatasetState,
    store: LocalRecordStore,
    backend: FakeBackend,
) -> None:
    """Keeping a ghost file forces the user back to file selection."""
    backend.mark_custom(SESSION_ID)
    await reconciler.reconcile()
    store.save(LocalDatasetRecord(name="sales.csv"))

    assert not await reconciler.resolve(keep_custom=True)

    assert state.file_upload is None
    assert store.load() is None
    assert state.awaiting_file_selection
    assert not state.mismatch


@pytest.mark.reconcile
async def test_switch_to_default_resolves_mismatch(
    reconciler: SessionReconciler, state: DatasetState, store: LocalRecordStore
) -> None:
    """Giving up the custom file previews the default dataset."""
    state.file_upload = FileUpload(file=csv_file(), status=UploadStatus.SUCCESS)
    store.save(LocalDatasetRecord.from_upload(state.file_upload))
    await reconciler.reconcile()

    assert await reconciler.resolve(keep_custom=False)

    assert state.file_upload is None
    assert store.load() is None
    assert state.show_preview
    assert state.description.name == "Dataset"
    assert not state.mismatch
    assert not state.show_reset_prompt


@pytest.mark.reconcile
async def test_failed_switch_to_default_keeps_prompt(
    reconciler: SessionReconciler,
    state: DatasetState,
    store: LocalRecordStore,
    backend: FakeBackend,
) -> None:
    """The mismatch prompt stays when the default dataset cannot be loaded."""
    state.file_upload = FileUpload(file=csv_file(), status=UploadStatus.SUCCESS)
    store.save(LocalDatasetRecord.from_upload(state.file_upload))
    assert await reconciler.reconcile() is ReconcileCase.SERVER_RESET
    backend.fail("/api/default-dataset")

    assert not await reconciler.resolve(keep_custom=False)

    assert state.mismatch
    assert state.show_reset_prompt
    assert state.file_upload is not None
    assert state.file_upload.status is UploadStatus.SUCCESS
    assert store.load() is not None


@pytest.mark.reconcile
async def test_restore_refresh_keeps_text_typed_meanwhile(
    reconciler: SessionReconciler,
    state: DatasetState,
    store: LocalRecordStore,
    backend: FakeBackend,
) -> None:
    """A description typed during the background refresh is not replaced."""
    backend.mark_custom(SESSION_ID, name="sales", description="Sales figures")
    store.save(LocalDatasetRecord(name="sales.csv"))
    gate = backend.hold("/api/preview-csv")

    assert await reconciler.reconcile() is ReconcileCase.RESTORED
    await eventually(lambda: "/api/preview-csv" in backend.paths())
    state.edit_description(description="Typed meanwhile")
    gate.set()
    await reconciler.join()

    assert state.description.description == "Typed meanwhile"
    assert state.file_preview is not None
    assert state.file_preview.description == "Sales figures"


@pytest.mark.reconcile
async def test_session_switch_supersedes_pipeline(
    reconciler: SessionReconciler,
    pipeline: UploadPipeline,
    state: DatasetState,
    backend: FakeBackend,
) -> None:
    """A session change drops the upload still in flight."""
    dispatcher = EventDispatcher(state, pipeline, reconciler)
    gate = backend.hold("/upload_dataframe")
    upload_task = asyncio.create_task(pipeline.begin_upload(csv_file()))
    await eventually(lambda: "/upload_dataframe" in backend.paths())

    case = await dispatcher.dispatch(SessionChanged(session_id="session-2"))
    gate.set()

    assert await upload_task is None
    assert case is ReconcileCase.DEFAULT
    assert state.session_id == "session-2"
    assert state.file_upload is None
    assert state.file_preview is None


@pytest.mark.reconcile
async def test_credits_change_reconciles_current_session(
    reconciler: SessionReconciler,
    pipeline: UploadPipeline,
    state: DatasetState,
    backend: FakeBackend,
) -> None:
    """A credit change re-checks the current session."""
    dispatcher = EventDispatcher(state, pipeline, reconciler)
    backend.mark_custom(SESSION_ID, name="Inventory")

    case = await dispatcher.dispatch(CreditsChanged())

    assert case is ReconcileCase.UNKNOWN_CUSTOM
    assert backend.calls[-1] == ("/api/session-info", SESSION_ID)


@pytest.mark.reconcile
async def test_placeholder_upload_is_refreshed_without_upload(
    pipeline: UploadPipeline, state: DatasetState, backend: FakeBackend
) -> None:
    """Previewing a restored ghost only fetches the server preview."""
    backend.mark_custom(SESSION_ID)
    state.file_upload = FileUpload(
        file=FileHandle.ghost("sales.csv"), status=UploadStatus.SUCCESS
    )

    preview = await pipeline.preview_current()

    assert preview is not None
    assert backend.paths() == ["/api/preview-csv"]
    assert state.show_preview
