"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules. Ledger
operations that must be atomic run against one `LedgerSessionPort` obtained
from `LedgerUnitOfWorkPort.db_unit_of_work()`.
"""

from collections.abc import Mapping
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from app.domain import (
    AuditEvent,
    AuditEventCategory,
    AuditEventRecord,
    HealthStatus,
    NotificationRecord,
    NotificationStatus,
    Partner,
    PeriodRecord,
    PeriodStatus,
    ProjectRecord,
    TransactionRecord,
    TransactionType,
)

PERIOD_LOCK_NONE = "none"
PERIOD_LOCK_SHARE = "share"
PERIOD_LOCK_UPDATE = "update"


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.

        Raises:
            RuntimeError: Raised when connection metadata is unavailable.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


@dataclass(frozen=True)
class PeriodCreateRequest:
    """Input payload for inserting one period row.

    Attributes:
        project_id: Owning project identifier.
        name: Period name, empty for `PENDING_NAME`.
        start_date: First day of the period.
        status: Initial status (`ACTIVE` or `PENDING_NAME`).
        starting_balances: Opening balance per partner.
    """

    project_id: UUID
    name: str
    start_date: date
    status: PeriodStatus
    starting_balances: Mapping[Partner, Decimal]


@dataclass(frozen=True)
class PeriodStatusUpdate:
    """Field values written by one period status transition.

    Attributes:
        status: Target status.
        name: Optional new name; None keeps the stored name.
        end_date: Optional closing date; None keeps the stored value.
        ending_balances: Optional closing balances; None keeps the stored value.
        opened_at_utc: Optional opened-at timestamp; None keeps the stored value.
        closed_at_utc: Optional closed-at timestamp; None keeps the stored value.
    """

    status: PeriodStatus
    name: str | None = None
    end_date: date | None = None
    ending_balances: Mapping[Partner, Decimal] | None = None
    opened_at_utc: datetime | None = None
    closed_at_utc: datetime | None = None


@dataclass(frozen=True)
class TransactionWriteRequest:
    """Validated field values for inserting or replacing one transaction.

    Attributes:
        transaction_type: Expense, revenue or settlement.
        transaction_date: Business date.
        description: Non-blank description.
        amount: Positive amount with at most two decimals.
        paid_by: Partner for expense/revenue.
        from_partner: Source partner for settlements.
        to_partner: Destination partner for settlements.
    """

    transaction_type: TransactionType
    transaction_date: date
    description: str
    amount: Decimal
    paid_by: Partner | None
    from_partner: Partner | None
    to_partner: Partner | None


class LedgerSessionPort(Protocol):
    """Period and transaction store operations bound to one open database transaction."""

    def db_project_lock(self, project_id: UUID) -> None:
        """Serialize period transitions of one project until the transaction ends.

        Args:
            project_id: Project identifier.

        Returns:
            None: Lock is held as side effect.

        Raises:
            RuntimeError: Raised when the lock cannot be taken.
        """

    def db_project_get(self, project_id: UUID) -> ProjectRecord | None:
        """Fetch one project by identifier.

        Args:
            project_id: Project identifier.

        Returns:
            ProjectRecord | None: Matching project or None.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_period_get(self, period_id: UUID, lock_mode: str = PERIOD_LOCK_NONE) -> PeriodRecord | None:
        """Fetch one period, optionally taking a row lock.

        Args:
            period_id: Period identifier.
            lock_mode: `none`, `share` (FOR SHARE) or `update` (FOR UPDATE).

        Returns:
            PeriodRecord | None: Matching period or None.

        Raises:
            ValueError: Raised for unsupported lock modes.
        """

    def db_period_list_for_project(self, project_id: UUID) -> list[PeriodRecord]:
        """List periods of one project, newest first.

        Args:
            project_id: Project identifier.

        Returns:
            list[PeriodRecord]: Periods ordered by creation time descending.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_period_create(self, request: PeriodCreateRequest) -> PeriodRecord:
        """Insert one period row.

        Args:
            request: Period field values.

        Returns:
            PeriodRecord: Inserted period.

        Raises:
            RuntimeError: Raised when the insert fails.
        """

    def db_period_update_status_and_balances(
        self,
        period_id: UUID,
        expected_status: PeriodStatus,
        update: PeriodStatusUpdate,
    ) -> PeriodRecord | None:
        """Compare-and-swap one period's status and write transition fields.

        Args:
            period_id: Period identifier.
            expected_status: Status the row must still hold.
            update: Field values to write.

        Returns:
            PeriodRecord | None: Updated period, or None when the status no longer matched.

        Raises:
            RuntimeError: Raised when the update fails.
        """

    def db_transaction_list_by_period(self, period_id: UUID) -> list[TransactionRecord]:
        """List every transaction of one period.

        Args:
            period_id: Period identifier.

        Returns:
            list[TransactionRecord]: Transactions ordered by date descending.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_transaction_list_by_project(self, project_id: UUID) -> list[TransactionRecord]:
        """List every transaction of one project across its periods.

        Args:
            project_id: Project identifier.

        Returns:
            list[TransactionRecord]: Transactions ordered by date descending.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_transaction_get(self, transaction_id: UUID) -> TransactionRecord | None:
        """Fetch one transaction.

        Args:
            transaction_id: Transaction identifier.

        Returns:
            TransactionRecord | None: Matching transaction or None.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_transaction_insert(
        self,
        project_id: UUID,
        period_id: UUID,
        request: TransactionWriteRequest,
        created_by: str | None,
    ) -> TransactionRecord:
        """Insert one transaction row.

        Args:
            project_id: Owning project identifier.
            period_id: Owning period identifier.
            request: Validated field values.
            created_by: Optional actor identifier.

        Returns:
            TransactionRecord: Inserted transaction.

        Raises:
            RuntimeError: Raised when the insert fails.
        """

    def db_transaction_update(self, transaction_id: UUID, request: TransactionWriteRequest) -> TransactionRecord:
        """Replace the editable fields of one transaction.

        Args:
            transaction_id: Transaction identifier.
            request: Validated field values.

        Returns:
            TransactionRecord: Updated transaction.

        Raises:
            TransactionNotFoundError: Raised when the transaction does not exist.
        """

    def db_transaction_delete(self, transaction_id: UUID) -> bool:
        """Delete one transaction.

        Args:
            transaction_id: Transaction identifier.

        Returns:
            bool: Whether a row was deleted.

        Raises:
            RuntimeError: Raised when the delete fails.
        """

    def db_audit_append(self, event: AuditEvent) -> AuditEventRecord:
        """Append one audit event inside the open transaction.

        Args:
            event: Event payload.

        Returns:
            AuditEventRecord: Persisted event row; discarded if the unit of work rolls back.

        Raises:
            RuntimeError: Raised when the insert fails.
        """


class LedgerUnitOfWorkPort(Protocol):
    """Port definition for opening all-or-nothing ledger units of work."""

    def db_unit_of_work(self) -> AbstractContextManager[LedgerSessionPort]:
        """Open one database transaction committed on clean exit and rolled back on error.

        Returns:
            AbstractContextManager[LedgerSessionPort]: Context yielding the bound session.

        Raises:
            RuntimeError: Raised when the database transaction fails.
        """


class ProjectRepositoryPort(Protocol):
    """Port definition for project reads and creation."""

    def db_project_create(self, name: str, description: str | None) -> ProjectRecord:
        """Insert one project.

        Args:
            name: Non-blank project name.
            description: Optional description.

        Returns:
            ProjectRecord: Inserted project.

        Raises:
            ValueError: Raised when name is blank.
        """

    def db_project_get_by_id(self, project_id: UUID) -> ProjectRecord | None:
        """Fetch one project.

        Args:
            project_id: Project identifier.

        Returns:
            ProjectRecord | None: Matching project or None.

        Raises:
            RuntimeError: Raised when the read fails.
        """

    def db_project_list(self, limit: int, offset: int) -> list[ProjectRecord]:
        """List projects ordered by creation time.

        Args:
            limit: Max rows.
            offset: Rows to skip.

        Returns:
            list[ProjectRecord]: Ordered projects.

        Raises:
            ValueError: Raised when pagination arguments are invalid.
        """


class AuditSinkPort(Protocol):
    """Port definition for the append-only audit trail."""

    def audit_append(self, event: AuditEvent) -> AuditEventRecord:
        """Append one audit event.

        Args:
            event: Event payload.

        Returns:
            AuditEventRecord: Persisted event row.

        Raises:
            RuntimeError: Raised when persistence fails.
        """


class AuditEventReadPort(Protocol):
    """Port definition for audit trail reads."""

    def db_audit_event_list(
        self,
        limit: int,
        offset: int,
        project_id: UUID | None = None,
        period_id: UUID | None = None,
        category: AuditEventCategory | None = None,
    ) -> list[AuditEventRecord]:
        """List audit events newest first with optional filters.

        Args:
            limit: Max rows.
            offset: Rows to skip.
            project_id: Optional project filter.
            period_id: Optional period filter.
            category: Optional category filter.

        Returns:
            list[AuditEventRecord]: Ordered events.

        Raises:
            ValueError: Raised when pagination arguments are invalid.
        """


class NotificationQueuePort(Protocol):
    """Port definition for per-transaction notification queue persistence."""

    def db_notification_enqueue_pending(self, transaction_id: UUID) -> NotificationRecord:
        """Queue one pending notification for a transaction.

        Args:
            transaction_id: Transaction identifier.

        Returns:
            NotificationRecord: Inserted notification.

        Raises:
            RuntimeError: Raised when the insert fails.
        """

    def db_notification_mark_delivery(
        self,
        notification_id: UUID,
        status: NotificationStatus,
        last_error: str | None,
    ) -> NotificationRecord | None:
        """Record the delivery outcome of one notification.

        Args:
            notification_id: Notification identifier.
            status: New status.
            last_error: Optional failure message.

        Returns:
            NotificationRecord | None: Updated notification or None when absent.

        Raises:
            RuntimeError: Raised when the update fails.
        """

    def db_notification_list(
        self,
        limit: int,
        offset: int,
        status: NotificationStatus | None = None,
    ) -> list[NotificationRecord]:
        """List notifications newest first.

        Args:
            limit: Max rows.
            offset: Rows to skip.
            status: Optional status filter.

        Returns:
            list[NotificationRecord]: Ordered notifications.

        Raises:
            ValueError: Raised when pagination arguments are invalid.
        """
