from __future__ import annotations


class MenuStoreError(Exception):
    """Base class for menu store failures."""


class MenuSaveError(MenuStoreError):
    """A menu document could not be written to the blob store."""


class IndexPersistError(MenuSaveError):
    """The index document or its pointer could not be written."""


class BlobNotFoundError(MenuStoreError):
    """Nothing is stored at the requested blob URL."""

    def __init__(self, url: str):
        super().__init__(f"Blob not found: {url}")
        self.url = url


class CircuitOpenError(MenuStoreError):
    """Calls are being short-circuited after repeated failures."""
