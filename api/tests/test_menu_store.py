from __future__ import annotations
import pytest
from menu_store import config
from menu_store.services.menu_repository import IdMatchPolicy
from menu_store.services.menu_store import MenuStore, create_menu_store
from menu_store.store.blob_store import InMemoryBlobStore
from menu_store.store.pointer_store import InMemoryPointerStore, NullPointerStore, RedisPointerStore
from tests.helpers import TickingClock, make_menu

@pytest.fixture
def store() -> MenuStore:
    return MenuStore(InMemoryBlobStore(), InMemoryPointerStore(), clock=TickingClock())

@pytest.mark.asyncio
async def test_empty_store_scenario(store):
    assert await store.get_by_id("x") is None
    assert await store.list_history() == []
    assert await store.search("A 30分", 30) == []

@pytest.mark.asyncio
async def test_save_lookup_list_and_search(store):
    await store.save("m1", make_menu(title="Sprint Set", duration=30, load_levels=["A"]))
    await store.save("m2", make_menu(title="Kick Focus", duration=60, load_levels=["B"]))

    assert (await store.get_by_id("m1")).title == "Sprint Set"
    assert [record.id for record in await store.list_history()] == ["m2", "m1"]

    results = await store.search("A", 30)
    assert [result.menu.title for result in results] == ["Sprint Set"]
    assert results[0].score >= 3

@pytest.mark.asyncio
async def test_blob_missing_scenario(store):
    entry = await store.save("m1", make_menu(duration=30))
    del store.blob_store.objects[entry.menu_data_url]

    assert await store.get_by_id("m1") is None
    assert await store.search("A", 30) == []

@pytest.mark.asyncio
async def test_health_check_reports_each_store(store):
    health = await store.health_check()

    assert health["status"] == "healthy"
    assert health["checks"]["blob_store"]["backend"] == "InMemoryBlobStore"
    assert health["checks"]["pointer_store"]["status"] == "healthy"

@pytest.mark.asyncio
async def test_health_check_reports_unreachable_store():
    class DownPointerStore(InMemoryPointerStore):
        async def ping(self):
            raise ConnectionError("connection refused")

    store = MenuStore(InMemoryBlobStore(), DownPointerStore())

    health = await store.health_check()

    assert health["status"] == "unhealthy"
    assert health["checks"]["pointer_store"] == {
        "status": "unhealthy",
        "backend": "DownPointerStore",
        "error": "connection refused",
    }
    assert health["checks"]["blob_store"]["status"] == "healthy"

def test_create_menu_store_without_backends(monkeypatch):
    monkeypatch.setattr(config, "REDIS_URL", None)
    monkeypatch.setattr(config, "AZURE_STORAGE_CONNECTION_STRING", None)
    monkeypatch.setattr(config, "MENU_ID_MATCH", "exact")

    store = create_menu_store()

    assert isinstance(store.pointer_store, NullPointerStore)
    assert isinstance(store.blob_store, InMemoryBlobStore)
    assert store.repository.id_match_policy is IdMatchPolicy.EXACT

def test_create_menu_store_with_redis_and_unknown_policy(monkeypatch):
    monkeypatch.setattr(config, "REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setattr(config, "AZURE_STORAGE_CONNECTION_STRING", None)
    monkeypatch.setattr(config, "MENU_ID_MATCH", "fuzzy")

    store = create_menu_store()

    assert isinstance(store.pointer_store, RedisPointerStore)
    assert store.repository.id_match_policy is IdMatchPolicy.EXACT_THEN_SUBSTRING

@pytest.mark.asyncio
async def test_unconfigured_pointer_store_loses_index():
    store = MenuStore(InMemoryBlobStore(), NullPointerStore())

    await store.save("m1", make_menu())

    # The document was written but the index pointer was dropped
    assert "memory://blobs/menus/m1.json" in store.blob_store.objects
    assert await store.get_by_id("m1") is None
