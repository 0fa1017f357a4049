"""Shared audit event builder utilities."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID

from .models import AuditEvent, AuditEventCategory, Partner


def domain_build_audit_event(
    category: AuditEventCategory,
    message: str,
    project_id: UUID | None = None,
    period_id: UUID | None = None,
    transaction_id: UUID | None = None,
    actor_id: str | None = None,
    metadata: dict[str, Any] | None = None,
    occurred_at_utc: datetime | None = None,
) -> AuditEvent:
    """Build one audit event, stamped with the current UTC time unless given.

    Args:
        category: Event category tag.
        message: Human-readable message.
        project_id: Optional project reference.
        period_id: Optional period reference.
        transaction_id: Optional transaction reference.
        actor_id: Optional actor reference.
        metadata: Optional JSON-compatible details object.
        occurred_at_utc: Optional event time, usually the transition clock reading.

    Returns:
        AuditEvent: Structured audit event.

    Raises:
        ValueError: Raised when message is blank.
    """

    if not message.strip():
        raise ValueError("message must not be blank")

    return AuditEvent(
        category=category,
        message=message,
        occurred_at_utc=occurred_at_utc or datetime.now(timezone.utc),
        project_id=project_id,
        period_id=period_id,
        transaction_id=transaction_id,
        actor_id=actor_id,
        metadata=dict(metadata or {}),
    )


def domain_serialize_balances(balances: Mapping[Partner, Decimal] | None) -> dict[str, str] | None:
    """Render a partner balance mapping as JSON-compatible strings.

    Args:
        balances: Partner balance mapping or None.

    Returns:
        dict[str, str] | None: Balances keyed by partner code, or None.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if balances is None:
        return None
    return {partner.value: str(balances[partner]) for partner in Partner if partner in balances}
