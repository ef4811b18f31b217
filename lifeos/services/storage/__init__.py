"""
Storage Services Package

Provides abstract interfaces and concrete implementations for local and
remote storage. The remote backend is chosen by configuration.
"""

from lifeos.services.storage.interface import (
    ConnectionError,
    LocalStoreInterface,
    RemoteStoreInterface,
    StorageError,
)
from lifeos.services.storage.local import InMemoryLocalStore, JsonFileStore
from lifeos.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsRemoteStore,
)
from lifeos.services.storage.supabase_store import (
    SupabaseRemoteStore,
    get_supabase_client,
)

__all__ = [
    # Interfaces
    "LocalStoreInterface",
    "RemoteStoreInterface",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Local implementations
    "InMemoryLocalStore",
    "JsonFileStore",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsRemoteStore",
    # Supabase implementation
    "SupabaseRemoteStore",
    "get_supabase_client",
]
