"""
Menu Store - persistence and similarity search for generated training menus.

Menus are kept as JSON documents in blob storage. A single index document
summarises every menu, and Redis holds the URL of its latest version.
"""

__version__ = "1.0.0"
__description__ = "Training menu persistence with blob storage, a Redis index pointer and heuristic search"

from .errors import MenuStoreError, MenuSaveError, IndexPersistError
from .services import MenuStore, create_menu_store

__all__ = [
    "MenuStore",
    "create_menu_store",
    "MenuStoreError",
    "MenuSaveError",
    "IndexPersistError"
]
