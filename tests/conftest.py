"""Common test fixtures for the datasession client."""

import os
from collections.abc import AsyncGenerator
from pathlib import Path

os.environ.setdefault("ENV", "testing")

import httpx
import pytest

from datasession.api.client import BackendClient
from datasession.commit.controller import CommitController
from datasession.controller import DatasetSessionController
from datasession.description.generator import DescriptionGenerator
from datasession.notify.notifier import ErrorNotifier
from datasession.record.store import LocalRecordStore
from datasession.session.default_dataset import DefaultDatasetLoader
from datasession.session.reconciler import SessionReconciler
from datasession.state import DatasetState
from datasession.upload.pipeline import UploadPipeline
from tests.fake_backend import FakeBackend
from tests.utils import (
    BANNER_DELAY,
    BASE_URL,
    ERROR_DELAY,
    SESSION_ID,
    SETTLE_DELAY,
)


@pytest.fixture
def backend() -> FakeBackend:
    """Fresh in-memory backend."""
    return FakeBackend()


@pytest.fixture
async def http_client(backend: FakeBackend) -> AsyncGenerator[httpx.AsyncClient]:
    """HTTP client routed into the fake backend."""
    transport = httpx.ASGITransport(app=backend.app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def client(http_client: httpx.AsyncClient) -> BackendClient:
    """Backend client bound to the fake backend."""
    return BackendClient(BASE_URL, http_client=http_client)


@pytest.fixture
def record_path(tmp_path: Path) -> Path:
    """Location of the local storage file."""
    return tmp_path / "local_storage.json"


@pytest.fixture
def store(record_path: Path) -> LocalRecordStore:
    """Record store in a temporary directory."""
    return LocalRecordStore(record_path)


@pytest.fixture
def state() -> DatasetState:
    """View state attached to the default test session."""
    return DatasetState(session_id=SESSION_ID)


@pytest.fixture
async def notifier() -> AsyncGenerator[ErrorNotifier]:
    """Notifier with a short dismissal delay."""
    notifier = ErrorNotifier(delay=ERROR_DELAY)
    yield notifier
    notifier.clear()


@pytest.fixture
def generator(client: BackendClient, state: DatasetState) -> DescriptionGenerator:
    """Description generator."""
    return DescriptionGenerator(client, state)


@pytest.fixture
async def pipeline(
    client: BackendClient,
    state: DatasetState,
    store: LocalRecordStore,
    notifier: ErrorNotifier,
    generator: DescriptionGenerator,
) -> AsyncGenerator[UploadPipeline]:
    """Upload pipeline with a short settle delay."""
    pipeline = UploadPipeline(
        client, state, store, notifier, generator, settle_delay=SETTLE_DELAY
    )
    yield pipeline
    pipeline.aclose()


@pytest.fixture
async def committer(
    client: BackendClient,
    state: DatasetState,
    store: LocalRecordStore,
    pipeline: UploadPipeline,
) -> AsyncGenerator[CommitController]:
    """Commit controller with a short banner delay."""
    committer = CommitController(
        client, state, store, pipeline, banner_delay=BANNER_DELAY
    )
    yield committer
    committer.aclose()


@pytest.fixture
def default_loader(
    client: BackendClient,
    state: DatasetState,
    store: LocalRecordStore,
    pipeline: UploadPipeline,
) -> DefaultDatasetLoader:
    """Default dataset loader."""
    return DefaultDatasetLoader(client, state, store, pipeline)


@pytest.fixture
async def reconciler(
    client: BackendClient,
    state: DatasetState,
    store: LocalRecordStore,
    pipeline: UploadPipeline,
    default_loader: DefaultDatasetLoader,
) -> AsyncGenerator[SessionReconciler]:
    """Session reconciler."""
    reconciler = SessionReconciler(client, state, store, pipeline, default_loader)
    yield reconciler
    reconciler.aclose()


@pytest.fixture
async def controller(
    http_client: httpx.AsyncClient, record_path: Path
) -> AsyncGenerator[DatasetSessionController]:
    """Fully wired facade."""
    async with DatasetSessionController(
        SESSION_ID,
        base_url=BASE_URL,
        http_client=http_client,
        record_path=record_path,
        error_dismiss_delay=ERROR_DELAY,
        success_banner_delay=BANNER_DELAY,
        description_settle_delay=SETTLE_DELAY,
    ) as controller:
        yield controller
