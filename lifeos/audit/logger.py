"""
Audit Logger

DESIGN DECISION: Every failure the store contains is logged here.
The store never raises persistence or subscriber errors to its callers,
so this log is the only place those failures become visible.

The audit logger:
- Is synchronous, matching the store's synchronous mutations
- Never raises (a broken log must not break a mutation)
- Keeps a bounded in-memory history of recent events for inspection
"""

from collections import deque
from typing import Optional

import structlog

from lifeos.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Writes each event as one structured log line at the event's severity
    and remembers the most recent events.
    """

    def __init__(self, history_size: int = 200):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("lifeos.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def recent_events(self, limit: Optional[int] = None) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(reversed(self._history))
        return events if limit is None else events[:limit]

    def log_state_loaded(self, source: str) -> None:
        self.log(AuditEventBuilder.state_loaded(source))

    def log_remote_load_skipped(self, reason: str) -> None:
        self.log(AuditEventBuilder.remote_load_skipped(reason))

    def log_remote_load_failed(self, user_id: Optional[str], error: BaseException) -> None:
        self.log(AuditEventBuilder.remote_load_failed(user_id, error))

    def log_local_parse_failed(self, key: str, error: BaseException) -> None:
        self.log(AuditEventBuilder.local_parse_failed(key, error))

    def log_mutation(
        self,
        operation: str,
        collection: str,
        entity_id: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.mutation_applied(operation, collection, entity_id))

    def log_local_write_failed(self, key: str, error: BaseException) -> None:
        self.log(AuditEventBuilder.local_write_failed(key, error))

    def log_remote_write_succeeded(self, user_id: str) -> None:
        self.log(AuditEventBuilder.remote_write_succeeded(user_id))

    def log_remote_write_failed(self, user_id: Optional[str], error: BaseException) -> None:
        self.log(AuditEventBuilder.remote_write_failed(user_id, error))

    def log_subscriber_failed(self, subscriber: str, error: BaseException) -> None:
        self.log(AuditEventBuilder.subscriber_failed(subscriber, error))

    def log_assistant_error(self, operation: str, error: BaseException) -> None:
        self.log(AuditEventBuilder.assistant_error(operation, error))
