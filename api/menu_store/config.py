from __future__ import annotations
import os

# Pointer store (Redis)
REDIS_URL: str | None = os.getenv("REDIS_URL") or os.getenv("KV_URL")
MENU_INDEX_KEY: str = os.getenv("MENU_INDEX_KEY", "menu:indexUrl")

# Blob store (Azure Blob Storage)
AZURE_STORAGE_CONNECTION_STRING: str | None = os.getenv("AZURE_STORAGE_CONNECTION_STRING")
AZURE_BLOB_CONTAINER: str = os.getenv("AZURE_BLOB_CONTAINER", "menus")
MENU_INDEX_PATH: str = os.getenv("MENU_INDEX_PATH", "menus/index.json")
MENU_DOCUMENT_PREFIX: str = os.getenv("MENU_DOCUMENT_PREFIX", "menus").strip("/")

# Lookup & search
MENU_ID_MATCH: str = os.getenv("MENU_ID_MATCH", "exact_then_substring").lower()
SEARCH_MAX_RESULTS: int = int(os.getenv("SEARCH_MAX_RESULTS", "5"))
SEARCH_MIN_SCORE: int = int(os.getenv("SEARCH_MIN_SCORE", "3"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_STRUCTURED: bool = os.getenv("LOG_STRUCTURED", "true").lower() == "true"

# OpenTelemetry Configuration
OTEL_EXPORTER_OTLP_ENDPOINT: str | None = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "menu-store")
