"""
Abstract Storage Interface

DESIGN DECISION: The store talks to two kinds of storage through abstract
interfaces. This allows us to:
1. Swap the remote backend (Supabase, Google Sheets) by configuration
2. Use in-memory storage for testing
3. Keep the aggregate store decoupled from any SDK

Local storage is a synchronous string key/value store holding whole
documents. Remote storage is an async per-user record store.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class LocalStoreInterface(ABC):
    """
    Synchronous key/value storage for whole serialized documents.

    Writes complete before the mutation that caused them returns.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the document stored under key.

        Returns:
            The stored text, or None if nothing is stored

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Overwrite the document stored under key.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete the document stored under key. Missing keys are ignored."""
        pass


class RemoteStoreInterface(ABC):
    """
    Async per-user record store.

    One record per user: {id, data, updated_at}. Writes are upserts by id,
    last write wins.
    """

    @abstractmethod
    async def current_user_id(self) -> Optional[str]:
        """
        The authenticated user, if any.

        Returns:
            The user id, or None when there is no session
        """
        pass

    @abstractmethod
    async def fetch_record(self, user_id: str) -> Optional[dict[str, Any]]:
        """
        Read the user's stored document.

        Returns:
            The data document, or None if the user has no record yet

        Raises:
            StorageError: On transport, auth or decoding failures
        """
        pass

    @abstractmethod
    async def upsert_record(self, user_id: str, document: dict[str, Any]) -> None:
        """
        Create or overwrite the user's record.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
