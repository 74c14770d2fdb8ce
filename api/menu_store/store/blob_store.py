from __future__ import annotations
import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobClient, BlobServiceClient
from menu_store.errors import BlobNotFoundError
from menu_store.obs.logging_setup import get_logger

logger = get_logger(__name__)

class BlobStore(ABC):
    """JSON document storage addressed by path on write and by URL on read."""

    @abstractmethod
    async def write(self, path: str, document: Dict[str, Any]) -> str:
        """Store `document` under `path` and return its URL, which need not match `path`."""

    @abstractmethod
    async def read(self, url: str) -> Any:
        """Fetch and decode the JSON document at `url`."""

    async def ping(self) -> None:
        """Raise if the store is unreachable."""

    async def close(self) -> None:
        pass

class InMemoryBlobStore(BlobStore):
    """Process-local blob store. Documents are kept serialized so reads never alias writes."""

    def __init__(self, base_url: str = "memory://blobs"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, str] = {}

    async def write(self, path: str, document: Dict[str, Any]) -> str:
        url = f"{self.base_url}/{path.lstrip('/')}"
        self.objects[url] = json.dumps(document, ensure_ascii=False)
        return url

    async def read(self, url: str) -> Any:
        try:
            raw = self.objects[url]
        except KeyError:
            raise BlobNotFoundError(url) from None
        return json.loads(raw)

class AzureBlobStore(BlobStore):
    """Azure Blob Storage container holding the menu documents."""

    def __init__(self, service: BlobServiceClient, container_name: str):
        self._service = service
        self._container = service.get_container_client(container_name)

    @staticmethod
    def from_connection_string(connection_string: str, container_name: str) -> "AzureBlobStore":
        return AzureBlobStore(
            BlobServiceClient.from_connection_string(connection_string),
            container_name,
        )

    @property
    def container_name(self) -> str:
        return self._container.container_name

    async def write(self, path: str, document: Dict[str, Any]) -> str:
        data = json.dumps(document, ensure_ascii=False).encode("utf-8")
        blob = self._container.get_blob_client(path.lstrip("/"))
        await blob.upload_blob(
            data,
            overwrite=True,
            content_settings=ContentSettings(content_type="application/json"),
        )
        logger.debug("Uploaded blob", blob_path=path, size_bytes=len(data))
        return blob.url

    async def read(self, url: str) -> Any:
        # Reads go through the URL, so documents may live in any container the credential can see
        async with BlobClient.from_blob_url(url, credential=self._service.credential) as blob:
            try:
                downloader = await blob.download_blob()
            except ResourceNotFoundError as exc:
                raise BlobNotFoundError(url) from exc
            raw = await downloader.readall()
        return json.loads(raw)

    async def ping(self) -> None:
        await self._container.get_container_properties()

    async def close(self) -> None:
        await self._service.close()

def create_blob_store(
    connection_string: Optional[str], container_name: str
) -> BlobStore:
    """Azure when a connection string is configured, otherwise in-memory."""
    if connection_string:
        logger.info("Using Azure blob store", container=container_name)
        return AzureBlobStore.from_connection_string(connection_string, container_name)

    logger.warning("AZURE_STORAGE_CONNECTION_STRING not set, using in-memory blob store")
    return InMemoryBlobStore()
