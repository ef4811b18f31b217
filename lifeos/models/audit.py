"""
Audit Models for Life OS

Every significant thing the store does with state is recorded as an event:
where the state was loaded from, each applied mutation, and every
persistence or collaborator failure that was contained instead of raised.

DESIGN DECISION: Failures that the store deliberately swallows (remote
writes, corrupt local documents, subscriber faults) are never silent.
They always produce an audit event at warning or error severity.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Grouped by the stage of the store lifecycle they belong to.
    """
    # Loading
    STATE_LOADED = "state_loaded"
    REMOTE_LOAD_SKIPPED = "remote_load_skipped"
    REMOTE_LOAD_FAILED = "remote_load_failed"
    LOCAL_PARSE_FAILED = "local_parse_failed"

    # Mutations
    MUTATION_APPLIED = "mutation_applied"

    # Persistence
    LOCAL_WRITE_FAILED = "local_write_failed"
    REMOTE_WRITE_SUCCEEDED = "remote_write_succeeded"
    REMOTE_WRITE_FAILED = "remote_write_failed"

    # Consumers and collaborators
    SUBSCRIBER_FAILED = "subscriber_failed"
    ASSISTANT_ERROR = "assistant_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Collection or component the event relates to (e.g., 'tasks', 'remote')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


def _error_fields(error: BaseException) -> dict[str, str]:
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.state_loaded("local")
        event = AuditEventBuilder.remote_write_failed(user_id, exc)
    """

    @staticmethod
    def state_loaded(source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="store",
            description=f"Application state loaded from {source}",
            details={"source": source},
        )

    @staticmethod
    def remote_load_skipped(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_LOAD_SKIPPED,
            severity=AuditSeverity.DEBUG,
            entity_type="remote",
            description=f"Remote load skipped: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def remote_load_failed(
        user_id: Optional[str],
        error: BaseException,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="remote",
            entity_id=user_id,
            description="Remote load failed, falling back to local state",
            **_error_fields(error),
        )

    @staticmethod
    def local_parse_failed(key: str, error: BaseException) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOCAL_PARSE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="local",
            entity_id=key,
            description=f"Local document '{key}' could not be parsed, using defaults",
            **_error_fields(error),
        )

    @staticmethod
    def mutation_applied(
        operation: str,
        collection: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_APPLIED,
            severity=AuditSeverity.DEBUG,
            entity_type=collection,
            entity_id=entity_id,
            description=f"{operation} applied to {collection}",
            details={"operation": operation},
        )

    @staticmethod
    def local_write_failed(key: str, error: BaseException) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOCAL_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="local",
            entity_id=key,
            description=f"Failed to write local document '{key}'",
            **_error_fields(error),
        )

    @staticmethod
    def remote_write_succeeded(user_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_WRITE_SUCCEEDED,
            severity=AuditSeverity.DEBUG,
            entity_type="remote",
            entity_id=user_id,
            description="Remote record upserted",
        )

    @staticmethod
    def remote_write_failed(
        user_id: Optional[str],
        error: BaseException,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMOTE_WRITE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="remote",
            entity_id=user_id,
            description="Remote write dropped after failure",
            **_error_fields(error),
        )

    @staticmethod
    def subscriber_failed(subscriber: str, error: BaseException) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIBER_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="subscriber",
            description=f"Subscriber {subscriber} raised while handling a state change",
            details={"subscriber": subscriber},
            **_error_fields(error),
        )

    @staticmethod
    def assistant_error(operation: str, error: BaseException) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSISTANT_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="assistant",
            description=f"Text generation failed during {operation}",
            details={"operation": operation},
            **_error_fields(error),
        )
