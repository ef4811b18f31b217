"""
Aggregate state store.

The store owns the application root, persists it locally on every
mutation and replicates it to the configured remote backend.
"""

from lifeos.store.data_store import (
    DEFAULT_STORAGE_KEY,
    DataStore,
    LoadState,
    StoreNotLoadedError,
)
from lifeos.store.defaults import build_default_data
from lifeos.store.merge import merge_with_defaults
from lifeos.store.sync import RemoteSync

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "DataStore",
    "LoadState",
    "RemoteSync",
    "StoreNotLoadedError",
    "build_default_data",
    "merge_with_defaults",
]
