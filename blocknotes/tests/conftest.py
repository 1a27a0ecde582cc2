"""Shared pytest fixtures."""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables before importing app modules
load_dotenv()

# Keep anything the app opens on its own away from the working directory
if not os.environ.get("STORAGE_PATH"):
    os.environ["STORAGE_PATH"] = "/tmp/blocknotes-test-storage"

from fastapi.testclient import TestClient  # noqa: E402

from blocknotes.api.router import get_page_store  # noqa: E402
from blocknotes.dependencies import StorageClient  # noqa: E402
from blocknotes.main import app  # noqa: E402
from blocknotes.pages.store import PageStore  # noqa: E402
from blocknotes.persistence.gateway import PersistenceGateway  # noqa: E402
from blocknotes.undo.coordinator import UndoCoordinator  # noqa: E402
from blocknotes.undo.models import UndoAction  # noqa: E402


class FakeClock:
    """Manually advanced stand-in for ``time.monotonic``."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingUndoManager:
    """Host undo facility that remembers what it was offered."""

    def __init__(self) -> None:
        self.actions: list[UndoAction] = []

    def register(self, action: UndoAction) -> None:
        self.actions.append(action)


@pytest.fixture
def storage(tmp_path: Path) -> StorageClient:
    """Create a StorageClient rooted in a temporary directory."""
    return StorageClient(root=tmp_path / "storage")


@pytest.fixture
def gateway(storage: StorageClient) -> PersistenceGateway:
    return PersistenceGateway(storage, key="pages")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def coordinator(clock: FakeClock) -> UndoCoordinator:
    """Create an UndoCoordinator with a 4 second window on the fake clock."""
    return UndoCoordinator(window_seconds=4.0, clock=clock)


@pytest.fixture
def store(gateway: PersistenceGateway, coordinator: UndoCoordinator) -> PageStore:
    """Create an empty PageStore backed by temporary storage."""
    return PageStore.open(gateway, coordinator)


@pytest.fixture
def client(store: PageStore) -> Iterator[TestClient]:
    """Create a FastAPI test client wired to the temporary store."""
    app.dependency_overrides[get_page_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
