from __future__ import annotations
import time
from typing import Any, Dict, List, Mapping, Optional, Union
from menu_store import config
from menu_store.models.schemas import HistoryRecord, IndexEntry, MenuDocument, ScoredMenu
from menu_store.obs.logging_setup import get_logger
from menu_store.services.index_manager import IndexManager
from menu_store.services.menu_repository import IdMatchPolicy, MenuRepository
from menu_store.services.similarity_search import SimilaritySearch
from menu_store.store.blob_store import BlobStore, create_blob_store
from menu_store.store.pointer_store import PointerStore, create_pointer_store

logger = get_logger(__name__)

class MenuStore:
    """Entry point for request handlers: one object wiring the stores to the services."""

    def __init__(
        self,
        blob_store: BlobStore,
        pointer_store: PointerStore,
        id_match_policy: IdMatchPolicy = IdMatchPolicy.EXACT_THEN_SUBSTRING,
        **repository_options: Any
    ):
        self.blob_store = blob_store
        self.pointer_store = pointer_store
        self.index_manager = IndexManager(blob_store, pointer_store)
        self.repository = MenuRepository(
            self.index_manager,
            id_match_policy=id_match_policy,
            **repository_options
        )
        self.search_engine = SimilaritySearch(self.index_manager)

    async def save(self, menu_id: str, document: Union[MenuDocument, Mapping[str, Any]]) -> IndexEntry:
        return await self.repository.save(menu_id, document)

    async def get_by_id(self, menu_id: str) -> Optional[MenuDocument]:
        return await self.repository.get_by_id(menu_id)

    async def list_history(self) -> List[HistoryRecord]:
        return await self.repository.list_history()

    async def search(self, query: str, target_duration: float) -> List[ScoredMenu]:
        return await self.search_engine.search(query, target_duration)

    async def health_check(self) -> Dict[str, Any]:
        """Reachability of both stores, in the shape of a readiness probe."""
        checks: Dict[str, Any] = {}
        for name, store in (("pointer_store", self.pointer_store), ("blob_store", self.blob_store)):
            start_time = time.perf_counter()
            try:
                await store.ping()
                checks[name] = {
                    "status": "healthy",
                    "backend": type(store).__name__,
                    "ping_ms": round((time.perf_counter() - start_time) * 1000, 2)
                }
            except Exception as e:
                checks[name] = {
                    "status": "unhealthy",
                    "backend": type(store).__name__,
                    "error": str(e)
                }

        healthy = all(check["status"] == "healthy" for check in checks.values())
        return {"status": "healthy" if healthy else "unhealthy", "checks": checks}

    async def close(self) -> None:
        await self.pointer_store.close()
        await self.blob_store.close()

def create_menu_store() -> MenuStore:
    """Build a MenuStore from environment configuration."""
    try:
        policy = IdMatchPolicy(config.MENU_ID_MATCH)
    except ValueError:
        logger.warning("Unknown MENU_ID_MATCH, using exact_then_substring", value=config.MENU_ID_MATCH)
        policy = IdMatchPolicy.EXACT_THEN_SUBSTRING

    return MenuStore(
        blob_store=create_blob_store(config.AZURE_STORAGE_CONNECTION_STRING, config.AZURE_BLOB_CONTAINER),
        pointer_store=create_pointer_store(config.REDIS_URL),
        id_match_policy=policy
    )
