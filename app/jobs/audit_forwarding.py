"""Helpers appending job-level audit events: access refusals and notification outcomes."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from app.db import AuditSinkPort
from app.domain import (
    AccessDeniedError,
    ActorContext,
    AuditEvent,
    AuditEventCategory,
    AuditEventRecord,
    domain_build_audit_event,
)

logger = logging.getLogger(__name__)


def job_forward_audit_events(audit_sink: AuditSinkPort, events: Iterable[AuditEvent]) -> list[AuditEventRecord]:
    """Append events to the audit sink in the order they were produced.

    Args:
        audit_sink: DB-layer audit sink.
        events: Ordered events produced outside a ledger unit of work.

    Returns:
        list[AuditEventRecord]: Persisted rows in input order.

    Raises:
        RuntimeError: Raised when the sink fails.
    """

    persisted_records: list[AuditEventRecord] = []
    for event in events:
        try:
            persisted_records.append(audit_sink.audit_append(event))
        except RuntimeError:
            logger.exception(
                "audit append failed category=%s period_id=%s transaction_id=%s",
                event.category.value,
                event.period_id,
                event.transaction_id,
            )
            raise
    return persisted_records


def job_record_access_denied(
    audit_sink: AuditSinkPort,
    error: AccessDeniedError,
    actor: ActorContext,
    project_id: UUID | None = None,
    period_id: UUID | None = None,
) -> AuditEventRecord:
    """Append one `ACCESS_DENIED` event for a refused operation.

    Args:
        audit_sink: DB-layer audit sink.
        error: Refusal raised by the guarded operation.
        actor: Refused caller.
        project_id: Optional project reference.
        period_id: Optional period reference.

    Returns:
        AuditEventRecord: Persisted event row.

    Raises:
        RuntimeError: Raised when the sink fails.
    """

    logger.warning(
        "access denied operation=%s actor_id=%s role=%s",
        error.operation,
        actor.actor_id,
        actor.role.value,
    )
    event = domain_build_audit_event(
        category=AuditEventCategory.ACCESS_DENIED,
        message=f"Access denied: {error.operation}",
        project_id=project_id,
        period_id=period_id,
        actor_id=actor.actor_id,
        metadata={"operation": error.operation, "role": actor.role.value},
    )
    return audit_sink.audit_append(event)


def job_require_admin(
    audit_sink: AuditSinkPort,
    actor: ActorContext,
    operation: str,
    project_id: UUID | None = None,
    period_id: UUID | None = None,
) -> None:
    """Refuse non-ADMIN callers and record the refusal.

    Args:
        audit_sink: DB-layer audit sink.
        actor: Caller context.
        operation: Operation name recorded in the event.
        project_id: Optional project reference.
        period_id: Optional period reference.

    Returns:
        None: Returns only when actor is ADMIN.

    Raises:
        AccessDeniedError: Raised when actor is not ADMIN.
    """

    if actor.actor_is_admin():
        return
    error = AccessDeniedError(f"{operation} requires the ADMIN role", operation=operation)
    job_record_access_denied(
        audit_sink=audit_sink,
        error=error,
        actor=actor,
        project_id=project_id,
        period_id=period_id,
    )
    raise error
