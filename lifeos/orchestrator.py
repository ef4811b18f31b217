"""
Application wiring for Life OS.

create_app_components() builds everything a front end needs from
settings: the local document store, the configured remote mirror, the
audit logger, the aggregate DataStore and the assistant.

DESIGN DECISION: Missing remote or Gemini configuration is not fatal.
The app keeps working local-only and the assistant answers with its
"unavailable" message, so a fresh checkout runs without any credentials.
"""

import logging
from typing import NamedTuple, Optional

import structlog

from lifeos.agents import LifeAssistant
from lifeos.audit import AuditLogger
from lifeos.config import GeminiSettings, get_settings
from lifeos.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsRemoteStore,
    JsonFileStore,
    LocalStoreInterface,
    RemoteStoreInterface,
    SupabaseRemoteStore,
    get_supabase_client,
)
from lifeos.store import DataStore


logger = structlog.get_logger(__name__)


class AppComponents(NamedTuple):
    store: DataStore
    assistant: LifeAssistant
    audit_logger: AuditLogger
    remote_store: Optional[RemoteStoreInterface]


def create_remote_store(backend: str) -> Optional[RemoteStoreInterface]:
    """
    Build the remote store for backend ("none", "supabase", "google_sheets").

    Returns None for "none", and when the backend's settings are missing
    or the client cannot be created.
    """
    if backend == "none":
        return None

    try:
        if backend == "supabase":
            settings = get_settings().supabase
            return SupabaseRemoteStore(
                client=get_supabase_client(),
                table_name=settings.table_name,
            )
        if backend == "google_sheets":
            return GoogleSheetsRemoteStore(GoogleSheetsClient())
    except Exception as e:
        # Remote not configured - continue local-only
        logger.warning("remote_store_unavailable", backend=backend, error=str(e))
        return None

    raise ValueError(f"Unknown remote backend: {backend}")


def _gemini_settings() -> Optional[GeminiSettings]:
    try:
        return get_settings().gemini
    except Exception as e:
        logger.warning("assistant_unconfigured", error=str(e))
        return None


def create_app_components(
    local_store: Optional[LocalStoreInterface] = None,
    use_remote: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        local_store: Override the local document store (tests). Defaults
                     to a JsonFileStore in the configured data directory.
        use_remote: Whether to attach the configured remote backend.
                    Set to False for local-only use.

    Returns:
        AppComponents(store, assistant, audit_logger, remote_store)
    """
    app_settings = get_settings().app
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if app_settings.debug_mode else logging.INFO,
    )
    audit_logger = AuditLogger()

    if local_store is None:
        local_store = JsonFileStore(app_settings.data_dir)

    remote_store = create_remote_store(app_settings.remote_backend) if use_remote else None

    store = DataStore(
        local_store=local_store,
        remote_store=remote_store,
        audit_logger=audit_logger,
        storage_key=app_settings.storage_key,
    )
    assistant = LifeAssistant(settings=_gemini_settings(), audit_logger=audit_logger)

    return AppComponents(
        store=store,
        assistant=assistant,
        audit_logger=audit_logger,
        remote_store=remote_store,
    )
