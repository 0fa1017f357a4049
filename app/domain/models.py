"""Typed domain models shared across runtime layers.

Partners, periods, transactions and audit events are plain frozen dataclasses
so every layer (ledger computation, db mapping, API serialization) exchanges the
same immutable records.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID


class Partner(str, Enum):
    """The two fixed partner identities sharing every project."""

    P1 = "P1"
    P2 = "P2"


class PeriodStatus(str, Enum):
    """Accounting period lifecycle states."""

    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    PENDING_NAME = "PENDING_NAME"


class TransactionType(str, Enum):
    """Financial event categories recorded inside a period."""

    EXPENSE = "EXPENSE"
    REVENUE = "REVENUE"
    SETTLEMENT = "SETTLEMENT"


class ActorRole(str, Enum):
    """Access roles: ADMIN manages periods, TX_ONLY records transactions."""

    ADMIN = "ADMIN"
    TX_ONLY = "TX_ONLY"


class AuditEventCategory(str, Enum):
    """Category tags carried by append-only audit events."""

    PERIOD_OPENED = "PERIOD_OPENED"
    PERIOD_CLOSED = "PERIOD_CLOSED"
    TX_CREATED = "TX_CREATED"
    TX_UPDATED = "TX_UPDATED"
    TX_DELETED = "TX_DELETED"
    ACCESS_DENIED = "ACCESS_DENIED"
    NOTIF_SENT = "NOTIF_SENT"
    NOTIF_FAILED = "NOTIF_FAILED"
    USER_LOGIN = "USER_LOGIN"
    USER_LOGOUT = "USER_LOGOUT"


class NotificationStatus(str, Enum):
    """Delivery state of one queued transaction notification."""

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


def domain_zero_balances() -> dict[Partner, Decimal]:
    """Return a zero balance for every partner."""

    return {partner: Decimal("0") for partner in Partner}


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class ActorContext:
    """Identity and role of the caller driving one ledger operation.

    Attributes:
        actor_id: Optional caller identifier recorded in audit events.
        role: Access role used for privileged operations.
    """

    actor_id: str | None
    role: ActorRole

    def actor_is_admin(self) -> bool:
        """Return whether this actor holds the ADMIN role."""

        return self.role == ActorRole.ADMIN


@dataclass(frozen=True)
class ProjectRecord:
    """One project grouping periods and transactions.

    Attributes:
        project_id: Project identifier.
        name: Display name.
        description: Optional free-text description.
        created_at_utc: Row creation timestamp in UTC.
    """

    project_id: UUID
    name: str
    description: str | None
    created_at_utc: datetime


@dataclass(frozen=True)
class PeriodRecord:
    """One accounting period of a project.

    Attributes:
        period_id: Period identifier.
        project_id: Owning project identifier.
        name: Period name, empty only while `PENDING_NAME`.
        start_date: First day of the period.
        end_date: Closing date, None while open.
        status: Lifecycle status.
        starting_balances: Signed opening balance per partner.
        ending_balances: Signed closing balance per partner, None until closed by reconciliation.
        opened_at_utc: Timestamp the period became usable.
        closed_at_utc: Timestamp the period was closed.
        created_at_utc: Row creation timestamp in UTC.
    """

    period_id: UUID
    project_id: UUID
    name: str
    start_date: date
    end_date: date | None
    status: PeriodStatus
    starting_balances: Mapping[Partner, Decimal]
    ending_balances: Mapping[Partner, Decimal] | None
    opened_at_utc: datetime
    closed_at_utc: datetime | None
    created_at_utc: datetime


@dataclass(frozen=True)
class TransactionRecord:
    """One financial event belonging to exactly one period.

    Attributes:
        transaction_id: Transaction identifier.
        project_id: Owning project identifier.
        period_id: Owning period identifier.
        transaction_type: Expense, revenue or settlement.
        transaction_date: Business date of the event.
        description: Free-text description.
        amount: Positive amount.
        paid_by: Paying/receiving partner for expense and revenue.
        from_partner: Source partner for settlements.
        to_partner: Destination partner for settlements.
        created_by: Optional actor identifier that recorded the event.
        created_at_utc: Row creation timestamp in UTC.
        updated_at_utc: Last update timestamp in UTC.
    """

    transaction_id: UUID
    project_id: UUID
    period_id: UUID
    transaction_type: TransactionType
    transaction_date: date
    description: str
    amount: Decimal
    paid_by: Partner | None
    from_partner: Partner | None
    to_partner: Partner | None
    created_by: str | None
    created_at_utc: datetime
    updated_at_utc: datetime


@dataclass(frozen=True)
class AuditEvent:
    """Append-only audit trail entry produced by ledger operations.

    Attributes:
        category: Event category tag.
        message: Human-readable message.
        occurred_at_utc: Event timestamp in UTC.
        project_id: Optional project reference.
        period_id: Optional period reference.
        transaction_id: Optional transaction reference.
        actor_id: Optional actor reference.
        metadata: JSON-compatible structured details.
    """

    category: AuditEventCategory
    message: str
    occurred_at_utc: datetime
    project_id: UUID | None = None
    period_id: UUID | None = None
    transaction_id: UUID | None = None
    actor_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AuditEventRecord:
    """Persisted audit event row.

    Attributes:
        event_log_id: Event row identifier.
        event: Appended event payload.
    """

    event_log_id: UUID
    event: AuditEvent


@dataclass(frozen=True)
class NotificationRecord:
    """Queued notification for one created transaction.

    Attributes:
        notification_id: Notification identifier.
        transaction_id: Transaction the notification announces.
        status: Delivery status.
        last_error: Last delivery error message.
        sent_at_utc: Delivery timestamp when sent.
        created_at_utc: Row creation timestamp in UTC.
        updated_at_utc: Last update timestamp in UTC.
    """

    notification_id: UUID
    transaction_id: UUID
    status: NotificationStatus
    last_error: str | None
    sent_at_utc: datetime | None
    created_at_utc: datetime
    updated_at_utc: datetime
