from __future__ import annotations
import pytest
from menu_store.obs.metrics import metrics_registry
from menu_store.services.index_manager import IndexManager
from menu_store.services.menu_repository import MenuRepository
from menu_store.services.similarity_search import SimilaritySearch
from menu_store.store.blob_store import InMemoryBlobStore
from menu_store.store.pointer_store import InMemoryPointerStore
from tests.helpers import TickingClock

@pytest.fixture(autouse=True)
def reset_metrics():
    metrics_registry.reset()
    yield

@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()

@pytest.fixture
def pointer_store() -> InMemoryPointerStore:
    return InMemoryPointerStore()

@pytest.fixture
def index_manager(blob_store, pointer_store) -> IndexManager:
    return IndexManager(blob_store, pointer_store)

@pytest.fixture
def repository(index_manager) -> MenuRepository:
    return MenuRepository(index_manager, clock=TickingClock())

@pytest.fixture
def search_engine(index_manager) -> SimilaritySearch:
    return SimilaritySearch(index_manager)
