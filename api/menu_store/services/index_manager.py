from __future__ import annotations
from pydantic import ValidationError
from menu_store.config import MENU_INDEX_KEY, MENU_INDEX_PATH
from menu_store.errors import IndexPersistError
from menu_store.models.schemas import MenuIndex
from menu_store.obs.decorators import traced
from menu_store.obs.logging_setup import get_logger
from menu_store.obs.metrics import inc_counter, set_gauge
from menu_store.store.blob_store import BlobStore
from menu_store.store.pointer_store import PointerStore

logger = get_logger(__name__)

class IndexManager:
    """
    Owns the index document listing every saved menu.

    The index lives in the blob store; the pointer store holds the URL of
    its latest version. Every write replaces the whole document.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        pointer_store: PointerStore,
        index_key: str = MENU_INDEX_KEY,
        index_path: str = MENU_INDEX_PATH
    ):
        self.blob_store = blob_store
        self.pointer_store = pointer_store
        self.index_key = index_key
        self.index_path = index_path

    @traced("index_load")
    async def load(self) -> MenuIndex:
        """Current index, or an empty one if it cannot be found or read."""
        try:
            index_url = await self.pointer_store.get(self.index_key)
        except Exception as e:
            logger.error("Failed to read index URL", key=self.index_key, error=str(e))
            inc_counter("index_load_failures", {"stage": "pointer"})
            return MenuIndex()

        if not index_url:
            logger.warning("Index URL not found in pointer store", key=self.index_key)
            return MenuIndex()

        try:
            raw = await self.blob_store.read(index_url)
        except Exception as e:
            logger.error("Failed to fetch index document", index_url=index_url, error=str(e))
            inc_counter("index_load_failures", {"stage": "blob"})
            return MenuIndex()

        try:
            index = MenuIndex.from_stored(raw)
        except ValidationError as e:
            logger.error("Index document is malformed", index_url=index_url, error=str(e))
            inc_counter("index_load_failures", {"stage": "parse"})
            return MenuIndex()

        skipped = index.unparsed_entries
        if skipped:
            logger.warning(
                "Skipping malformed index entries",
                index_url=index_url,
                skipped_count=len(skipped),
                skipped_ids=[item.get("id") if isinstance(item, dict) else None for item in skipped]
            )
            inc_counter("index_entries_skipped", value=len(skipped))

        logger.info("Loaded index", menu_count=len(index.menus))
        set_gauge("index_size", len(index.menus))
        return index

    @traced("index_persist")
    async def persist(self, index: MenuIndex) -> str:
        """Write the index and point the pointer store at it. Returns the index URL."""
        try:
            index_url = await self.blob_store.write(self.index_path, index.to_json_dict())
        except Exception as e:
            raise IndexPersistError(f"Failed to write index document to {self.index_path}") from e

        try:
            await self.pointer_store.set(self.index_key, index_url)
        except Exception as e:
            raise IndexPersistError(f"Failed to publish index URL under {self.index_key}") from e

        logger.info("Persisted index", index_url=index_url, menu_count=len(index.menus))
        set_gauge("index_size", len(index.menus))
        return index_url
