from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from menu_store.store.blob_store import InMemoryBlobStore
from menu_store.store.pointer_store import InMemoryPointerStore

class TickingClock:
    """Returns a later time on every call so saved menus get distinct timestamps."""

    def __init__(self, start: datetime = datetime(2024, 4, 1, 9, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        moment = self.current
        self.current += timedelta(minutes=1)
        return moment

def make_menu(
    title: str = "Sprint Set",
    duration: Optional[int] = 30,
    load_levels: Optional[List[str]] = None,
    sections: Optional[List[str]] = None,
    **extra: Any
) -> Dict[str, Any]:
    """A stored-menu payload in its JSON (camelCase) form."""
    section_names = sections if sections is not None else ["W-up", "Main", "Down"]
    menu = {
        "title": title,
        "menu": [
            {
                "name": name,
                "items": [{
                    "description": "Freestyle easy",
                    "distance": "200",
                    "sets": 1,
                    "circle": "3:30",
                    "rest": 0,
                    "time": 4,
                }],
                "totalTime": 4,
            }
            for name in section_names
        ],
        "totalTime": 4 * len(section_names),
        "intensity": "medium",
        "targetSkills": ["pacing"],
        "duration": duration,
        "loadLevels": load_levels if load_levels is not None else ["A"],
        "notes": "",
        "aiModel": "test-model",
    }
    menu.update(extra)
    return menu

class FlakyBlobStore(InMemoryBlobStore):
    """In-memory blob store whose writes to chosen paths fail."""

    def __init__(self, failing_paths=()):
        super().__init__()
        self.failing_paths = set(failing_paths)

    async def write(self, path: str, document: Dict[str, Any]) -> str:
        if path in self.failing_paths:
            raise ConnectionError(f"write to {path} refused")
        return await super().write(path, document)

class FlakyPointerStore(InMemoryPointerStore):
    def __init__(self, fail_get: bool = False, fail_set: bool = False):
        super().__init__()
        self.fail_get = fail_get
        self.fail_set = fail_set

    async def get(self, key: str) -> Optional[str]:
        if self.fail_get:
            raise ConnectionError("pointer store unreachable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise ConnectionError("pointer store unreachable")
        await super().set(key, value)
