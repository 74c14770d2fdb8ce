"""
Data models.

Provides:
- Menu documents as stored in the blob store
- Index document and its entries
- History and search result records
"""

from .schemas import (
    MenuItem,
    MenuSection,
    MenuDocument,
    MenuMetadata,
    IndexEntry,
    MenuIndex,
    HistoryRecord,
    ScoredMenu
)

__all__ = [
    "MenuItem",
    "MenuSection",
    "MenuDocument",
    "MenuMetadata",
    "IndexEntry",
    "MenuIndex",
    "HistoryRecord",
    "ScoredMenu"
]
