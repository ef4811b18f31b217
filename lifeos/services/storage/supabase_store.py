"""
Supabase Remote Store

One row per user in the app_data table:

    id          the auth user id (primary key)
    data        the whole application document (jsonb)
    updated_at  ISO timestamp of the last write

The supabase client is synchronous; calls run in a worker thread so a
fire-and-forget write scheduled on the event loop never blocks it.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import structlog
from supabase import Client, create_client

from lifeos.config import get_settings
from lifeos.services.storage.interface import (
    ConnectionError,
    RemoteStoreInterface,
    StorageError,
)


# PostgREST reports "zero rows for a single-row read" with these codes
NO_ROWS_ERROR_CODES = frozenset({"PGRST116", "204"})

logger = structlog.get_logger(__name__)


def get_supabase_client() -> Client:
    """Create a Supabase client from settings."""
    settings = get_settings().supabase
    try:
        return create_client(settings.url, settings.key)
    except Exception as e:
        raise ConnectionError(f"Failed to create Supabase client: {e}") from e


class SupabaseRemoteStore(RemoteStoreInterface):
    """Supabase implementation of the per-user record store."""

    def __init__(
        self,
        client: Optional[Client] = None,
        table_name: Optional[str] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._client = client
        self._table_name = table_name
        self._clock = clock

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    @property
    def table_name(self) -> str:
        if self._table_name is None:
            self._table_name = get_settings().supabase.table_name
        return self._table_name

    def _table(self):
        return self.client.table(self.table_name)

    async def current_user_id(self) -> Optional[str]:
        """The signed-in user, or None without a session."""
        try:
            response = await asyncio.to_thread(self.client.auth.get_user)
        except Exception as e:
            # The auth client raises when there is no valid session
            logger.warning("supabase_auth_failed", error=str(e), error_type=type(e).__name__)
            return None
        user = getattr(response, "user", None) if response is not None else None
        return getattr(user, "id", None)

    def _select_record(self, user_id: str):
        return (
            self._table()
            .select("data")
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )

    async def fetch_record(self, user_id: str) -> Optional[dict[str, Any]]:
        try:
            response = await asyncio.to_thread(self._select_record, user_id)
        except Exception as e:
            if getattr(e, "code", None) in NO_ROWS_ERROR_CODES:
                return None
            raise StorageError(f"Failed to fetch record for {user_id}: {e}") from e

        if response is None or not response.data:
            return None

        data = response.data.get("data")
        if data is None:
            return None
        if not isinstance(data, dict):
            raise StorageError(
                f"Record for {user_id} holds {type(data).__name__}, expected an object"
            )
        return data

    def _upsert(self, user_id: str, document: dict[str, Any]):
        return (
            self._table()
            .upsert(
                {
                    "id": user_id,
                    "data": document,
                    "updated_at": self._clock().isoformat(),
                },
                on_conflict="id",
            )
            .execute()
        )

    async def upsert_record(self, user_id: str, document: dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self._upsert, user_id, document)
        except Exception as e:
            raise StorageError(f"Failed to upsert record for {user_id}: {e}") from e
