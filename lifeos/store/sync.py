"""
Fire-and-forget remote replication.

Each mutation hands the serialized root to RemoteSync.schedule(). The
write runs on the caller's event loop when one is running, otherwise on
a daemon thread with its own loop. Writes are unordered and never
retried; a failure is logged and dropped. flush() waits for whatever is
in flight.
"""

import asyncio
import threading
from typing import Any, Optional

from lifeos.audit import AuditLogger
from lifeos.services.storage import RemoteStoreInterface


class RemoteSync:
    """Pushes whole documents to the remote store without blocking mutations."""

    def __init__(
        self,
        remote_store: RemoteStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._remote = remote_store
        self._audit_logger = audit_logger
        self._lock = threading.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._threads: set[threading.Thread] = set()

    @property
    def pending(self) -> int:
        """Writes scheduled but not finished."""
        with self._lock:
            tasks = sum(1 for t in self._tasks if not t.done())
            threads = sum(1 for t in self._threads if t.is_alive())
        return tasks + threads

    def schedule(self, document: dict[str, Any]) -> None:
        """Start a remote write for document and return immediately."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self.push(document))
            with self._lock:
                self._tasks.add(task)
            task.add_done_callback(self._forget_task)
            return

        thread = threading.Thread(
            target=self._run_in_thread,
            args=(document,),
            name="lifeos-remote-sync",
            daemon=True,
        )
        with self._lock:
            self._threads.add(thread)
        thread.start()

    async def push(self, document: dict[str, Any]) -> bool:
        """
        Write document for the current user.

        Returns:
            True if the record was written. No session, or a failed write,
            returns False; failures are logged, never raised.
        """
        user_id: Optional[str] = None
        try:
            user_id = await self._remote.current_user_id()
            if not user_id:
                return False
            await self._remote.upsert_record(user_id, document)
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_remote_write_failed(user_id, e)
            return False

        if self._audit_logger:
            self._audit_logger.log_remote_write_succeeded(user_id)
        return True

    async def flush(self) -> None:
        """Wait for in-flight writes started on this loop or on threads."""
        loop = asyncio.get_running_loop()
        with self._lock:
            tasks = [t for t in self._tasks if not t.done() and t.get_loop() is loop]
            threads = list(self._threads)

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for thread in threads:
            await asyncio.to_thread(thread.join)

    def _run_in_thread(self, document: dict[str, Any]) -> None:
        try:
            asyncio.run(self.push(document))
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    def _forget_task(self, task: asyncio.Task) -> None:
        with self._lock:
            self._tasks.discard(task)
