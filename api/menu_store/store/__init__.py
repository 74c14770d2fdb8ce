"""
Storage backends.

Provides:
- Blob stores for menu and index JSON documents (Azure, in-memory)
- Pointer stores for the index location (Redis, in-memory, null)
"""

from .blob_store import BlobStore, AzureBlobStore, InMemoryBlobStore, create_blob_store
from .pointer_store import (
    PointerStore,
    RedisPointerStore,
    InMemoryPointerStore,
    NullPointerStore,
    create_pointer_store
)

__all__ = [
    "BlobStore",
    "AzureBlobStore",
    "InMemoryBlobStore",
    "create_blob_store",
    "PointerStore",
    "RedisPointerStore",
    "InMemoryPointerStore",
    "NullPointerStore",
    "create_pointer_store"
]
