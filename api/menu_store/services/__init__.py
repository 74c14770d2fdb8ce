"""
Menu persistence services.

Provides:
- Index document management
- Menu save, lookup and history
- Heuristic similarity search
- MenuStore facade built from configuration
"""

from .index_manager import IndexManager
from .menu_repository import MenuRepository, IdMatchPolicy
from .similarity_search import SimilaritySearch, parse_query
from .menu_store import MenuStore, create_menu_store

__all__ = [
    "IndexManager",
    "MenuRepository",
    "IdMatchPolicy",
    "SimilaritySearch",
    "parse_query",
    "MenuStore",
    "create_menu_store"
]
