"""Services package."""

from lifeos.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsRemoteStore,
    InMemoryLocalStore,
    JsonFileStore,
    LocalStoreInterface,
    RemoteStoreInterface,
    StorageError,
    SupabaseRemoteStore,
)

__all__ = [
    # Storage services
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsRemoteStore",
    "InMemoryLocalStore",
    "JsonFileStore",
    "LocalStoreInterface",
    "RemoteStoreInterface",
    "StorageError",
    "SupabaseRemoteStore",
]
