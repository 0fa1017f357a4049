"""JSON serializers for typed ledger records."""

from __future__ import annotations

from datetime import date, datetime

from app.domain import (
    AuditEventRecord,
    NotificationRecord,
    PeriodRecord,
    ProjectRecord,
    TransactionRecord,
    domain_serialize_balances,
)
from app.ledger import PeriodBalancePreview


def api_serialize_project_record(project: ProjectRecord) -> dict[str, object]:
    """Serialize one project."""

    return {
        "project_id": str(project.project_id),
        "name": project.name,
        "description": project.description,
        "created_at_utc": project.created_at_utc.isoformat(),
    }


def api_serialize_period_record(period: PeriodRecord) -> dict[str, object]:
    """Serialize one period with balances rendered as decimal strings.

    Args:
        period: Typed period record.

    Returns:
        dict[str, object]: JSON-serializable period payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "period_id": str(period.period_id),
        "project_id": str(period.project_id),
        "name": period.name,
        "status": period.status.value,
        "start_date": period.start_date.isoformat(),
        "end_date": _api_isoformat(period.end_date),
        "starting_balances": domain_serialize_balances(period.starting_balances),
        "ending_balances": domain_serialize_balances(period.ending_balances),
        "opened_at_utc": period.opened_at_utc.isoformat(),
        "closed_at_utc": _api_isoformat(period.closed_at_utc),
        "created_at_utc": period.created_at_utc.isoformat(),
    }


def api_serialize_transaction_record(transaction: TransactionRecord) -> dict[str, object]:
    """Serialize one transaction."""

    return {
        "transaction_id": str(transaction.transaction_id),
        "project_id": str(transaction.project_id),
        "period_id": str(transaction.period_id),
        "transaction_type": transaction.transaction_type.value,
        "transaction_date": transaction.transaction_date.isoformat(),
        "description": transaction.description,
        "amount": str(transaction.amount),
        "paid_by": transaction.paid_by.value if transaction.paid_by else None,
        "from_partner": transaction.from_partner.value if transaction.from_partner else None,
        "to_partner": transaction.to_partner.value if transaction.to_partner else None,
        "created_by": transaction.created_by,
        "created_at_utc": transaction.created_at_utc.isoformat(),
        "updated_at_utc": transaction.updated_at_utc.isoformat(),
    }


def api_serialize_balance_preview(preview: PeriodBalancePreview) -> dict[str, object]:
    """Serialize one read-only period reconciliation.

    Args:
        preview: Aggregation and reconciliation of a period.

    Returns:
        dict[str, object]: Totals, per-partner sums and projected ending balances.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    aggregate = preview.aggregate
    reconciliation = preview.reconciliation
    return {
        "period": api_serialize_period_record(preview.period),
        "transaction_count": aggregate.transaction_count,
        "total_expenses": str(aggregate.total_expenses),
        "total_revenues": str(aggregate.total_revenues),
        "unattributed_amount": str(aggregate.unattributed_amount),
        "net_profit": str(reconciliation.net_profit),
        "profit_share": str(reconciliation.profit_share),
        "partners": {
            partner.value: {
                "expenses_paid": str(partner_aggregate.expenses_paid),
                "revenues_received": str(partner_aggregate.revenues_received),
                "settlements_paid": str(partner_aggregate.settlements_paid),
                "settlements_received": str(partner_aggregate.settlements_received),
            }
            for partner, partner_aggregate in aggregate.partners.items()
        },
        "ending_balances": domain_serialize_balances(reconciliation.ending_balances),
        "imbalance": str(reconciliation.imbalance),
        "balanced": reconciliation.balanced,
    }


def api_serialize_audit_event_record(record: AuditEventRecord) -> dict[str, object]:
    """Serialize one persisted audit event."""

    event = record.event
    return {
        "event_log_id": str(record.event_log_id),
        "category": event.category.value,
        "message": event.message,
        "occurred_at_utc": event.occurred_at_utc.isoformat(),
        "project_id": _api_optional_str(event.project_id),
        "period_id": _api_optional_str(event.period_id),
        "transaction_id": _api_optional_str(event.transaction_id),
        "actor_id": event.actor_id,
        "metadata": event.metadata,
    }


def api_serialize_notification_record(notification: NotificationRecord) -> dict[str, object]:
    """Serialize one notification."""

    return {
        "notification_id": str(notification.notification_id),
        "transaction_id": str(notification.transaction_id),
        "status": notification.status.value,
        "last_error": notification.last_error,
        "sent_at_utc": _api_isoformat(notification.sent_at_utc),
        "created_at_utc": notification.created_at_utc.isoformat(),
        "updated_at_utc": notification.updated_at_utc.isoformat(),
    }


def api_build_page(limit: int, applied_limit: int, offset: int, returned: int) -> dict[str, int]:
    """Build the pagination block shared by list endpoints."""

    return {
        "limit": limit,
        "applied_limit": applied_limit,
        "offset": offset,
        "returned": returned,
    }


def _api_isoformat(value: date | datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def _api_optional_str(value: object | None) -> str | None:
    if value is None:
        return None
    return str(value)
