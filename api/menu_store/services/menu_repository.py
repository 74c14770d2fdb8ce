from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Union
from pydantic import ValidationError
from menu_store.config import MENU_DOCUMENT_PREFIX
from menu_store.errors import MenuSaveError
from menu_store.models.schemas import (
    HistoryRecord,
    IndexEntry,
    MenuDocument,
    MenuIndex,
    MenuMetadata
)
from menu_store.obs.decorators import traced
from menu_store.obs.logging_setup import get_logger
from menu_store.obs.metrics import inc_counter
from menu_store.services.index_manager import IndexManager
from menu_store.utils.parsing import (
    format_timestamp,
    parse_leading_int,
    parse_timestamp,
    stringify_number
)

logger = get_logger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)

class IdMatchPolicy(str, Enum):
    """How `get_by_id` picks an index entry for a requested id."""
    EXACT = "exact"
    EXACT_THEN_SUBSTRING = "exact_then_substring"
    SUBSTRING = "substring"

def _ids_overlap(entry_id: str, menu_id: str) -> bool:
    return entry_id == menu_id or menu_id in entry_id or entry_id in menu_id

def find_entry(index: MenuIndex, menu_id: str, policy: IdMatchPolicy) -> Optional[IndexEntry]:
    """First entry matching `menu_id` in index order."""
    if policy is IdMatchPolicy.SUBSTRING:
        return next((e for e in index.menus if _ids_overlap(e.id, menu_id)), None)

    exact = next((e for e in index.menus if e.id == menu_id), None)
    if exact is not None or policy is IdMatchPolicy.EXACT:
        return exact

    return next((e for e in index.menus if _ids_overlap(e.id, menu_id)), None)

def build_metadata(document: MenuDocument, created_at: str) -> MenuMetadata:
    return MenuMetadata(
        load_levels=",".join(document.load_levels) if document.load_levels else "",
        duration=stringify_number(document.duration),
        notes=document.notes or "",
        created_at=created_at,
        total_time=stringify_number(document.total_time),
        intensity=document.intensity or "",
        target_skills=list(document.target_skills or []),
        title=document.title or "Untitled",
        ai_model=document.ai_model or "Unknown",
    )

def to_history_record(entry: IndexEntry) -> HistoryRecord:
    metadata = entry.metadata
    return HistoryRecord.model_validate({
        **metadata.model_dump(by_alias=True),
        "id": entry.id,
        "loadLevels": [level for level in metadata.load_levels.split(",") if level],
        "duration": parse_leading_int(metadata.duration) or 0,
        "totalTime": parse_leading_int(metadata.total_time) or 0,
        "targetSkills": list(metadata.target_skills),
    })

class MenuRepository:
    """Saves menus and reads them back through the index."""

    def __init__(
        self,
        index_manager: IndexManager,
        id_match_policy: IdMatchPolicy = IdMatchPolicy.EXACT_THEN_SUBSTRING,
        document_prefix: str = MENU_DOCUMENT_PREFIX,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        self.index_manager = index_manager
        self.id_match_policy = id_match_policy
        self.document_prefix = document_prefix.strip("/")
        self._clock = clock

    @property
    def blob_store(self):
        return self.index_manager.blob_store

    def document_path(self, menu_id: str) -> str:
        return f"{self.document_prefix}/{menu_id}.json"

    @traced("menu_save")
    async def save(self, menu_id: str, document: Union[MenuDocument, Mapping[str, Any]]) -> IndexEntry:
        """
        Store a menu and append it to the index.

        Raises MenuSaveError if the document is invalid or cannot be written, and
        IndexPersistError if the index update fails. In the latter case the
        document blob is left in place without an index entry.
        """
        if not isinstance(document, MenuDocument):
            try:
                document = MenuDocument.model_validate(document)
            except ValidationError as e:
                raise MenuSaveError(f"Menu {menu_id} is not a valid menu document") from e

        path = self.document_path(menu_id)
        try:
            menu_data_url = await self.blob_store.write(path, document.to_json_dict())
        except Exception as e:
            raise MenuSaveError(f"Failed to write menu {menu_id} to {path}") from e
        logger.info("Saved menu document", menu_id=menu_id, menu_data_url=menu_data_url)

        index = await self.index_manager.load()
        entry = IndexEntry(
            id=menu_id,
            metadata=build_metadata(document, format_timestamp(self._clock())),
            menu_data_url=menu_data_url,
        )
        index.menus.append(entry)
        await self.index_manager.persist(index)

        inc_counter("menus_saved")
        return entry

    @traced("menu_get")
    async def get_by_id(self, menu_id: str) -> Optional[MenuDocument]:
        """The stored menu for `menu_id`, or None if it cannot be found or read."""
        inc_counter("menu_lookups")
        try:
            index = await self.index_manager.load()
            if not index.menus:
                logger.warning("Index contains no menus", menu_id=menu_id)
                return self._miss("empty_index")

            entry = find_entry(index, menu_id, self.id_match_policy)
            if entry is None:
                logger.warning("Menu not found in index", menu_id=menu_id)
                return self._miss("not_indexed")

            if not entry.menu_data_url:
                logger.warning("Index entry has no menu data URL", menu_id=entry.id)
                return self._miss("missing_url")

            raw = await self.blob_store.read(entry.menu_data_url)
            document = MenuDocument.model_validate(raw)
        except Exception as e:
            logger.error("Failed to fetch menu", menu_id=menu_id, error=str(e))
            return self._miss("fetch_failed")

        logger.info("Fetched menu", menu_id=entry.id)
        return document

    def _miss(self, reason: str) -> None:
        inc_counter("menu_lookup_misses", {"reason": reason})
        return None

    @traced("menu_history")
    async def list_history(self) -> List[HistoryRecord]:
        """Summaries of every indexed menu, newest first."""
        try:
            index = await self.index_manager.load()
            records = [to_history_record(entry) for entry in index.menus]
        except Exception as e:
            logger.error("Failed to list menu history", error=str(e))
            return []

        def newest_first(record: HistoryRecord):
            created = parse_timestamp(record.created_at)
            return (created is not None, created or _OLDEST)

        return sorted(records, key=newest_first, reverse=True)
