"""Typed interfaces for ledger-layer period and transaction operations."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from app.domain import ActorContext, AuditEvent, PeriodRecord, TransactionRecord

from .aggregation import PeriodAggregate
from .reconciliation import ReconciliationResult


@dataclass(frozen=True)
class PeriodTransitionResult:
    """Outcome of one period state transition.

    Attributes:
        period: Primary period of the operation (closed, named, bootstrapped or reset target).
        successor: Successor period opened by a close, otherwise None.
        events: Ordered audit events produced by the transition.
        created: False when bootstrap found existing periods and changed nothing.
        closed_periods: Periods force-closed by a hard reset.
    """

    period: PeriodRecord
    successor: PeriodRecord | None
    events: tuple[AuditEvent, ...]
    created: bool = True
    closed_periods: tuple[PeriodRecord, ...] = ()


@dataclass(frozen=True)
class PeriodBalancePreview:
    """Read-only reconciliation of a period's current transactions.

    Attributes:
        period: Previewed period.
        aggregate: Aggregation output.
        reconciliation: Reconciliation output, including the zero-sum verdict.
    """

    period: PeriodRecord
    aggregate: PeriodAggregate
    reconciliation: ReconciliationResult


@dataclass(frozen=True)
class TransactionDraft:
    """Unvalidated transaction input as received from callers.

    Attributes:
        transaction_type: Type code (`EXPENSE`, `REVENUE`, `SETTLEMENT`).
        transaction_date: Business date.
        description: Free-text description.
        amount: Amount as decimal or decimal string.
        paid_by: Partner code for expense/revenue.
        from_partner: Source partner code for settlements.
        to_partner: Destination partner code for settlements.
    """

    transaction_type: str
    transaction_date: date
    description: str
    amount: Decimal | str
    paid_by: str | None = None
    from_partner: str | None = None
    to_partner: str | None = None


@dataclass(frozen=True)
class TransactionMutationResult:
    """Outcome of one gated transaction write.

    Attributes:
        transaction: Written transaction (the removed row for deletes).
        events: Ordered audit events produced by the write.
    """

    transaction: TransactionRecord
    events: tuple[AuditEvent, ...]


class PeriodLedgerPort(Protocol):
    """Port definition for period lifecycle operations."""

    def ledger_period_close(self, period_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Reconcile and close one active period, opening its pending successor."""

    def ledger_period_name(self, period_id: UUID, name: str, actor: ActorContext) -> PeriodTransitionResult:
        """Name one pending period and activate it."""

    def ledger_period_bootstrap(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Create the first active period of a project without periods."""

    def ledger_period_hard_reset(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Force-close open periods and start over from zero balances."""

    def ledger_period_preview(self, period_id: UUID) -> PeriodBalancePreview:
        """Reconcile one period without writing."""

    def ledger_period_get(self, period_id: UUID) -> PeriodRecord:
        """Fetch one period."""

    def ledger_period_list_for_project(self, project_id: UUID) -> list[PeriodRecord]:
        """List periods of one project newest first."""


class TransactionLedgerPort(Protocol):
    """Port definition for status-gated transaction writes and reads."""

    def ledger_transaction_create(
        self,
        period_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Record one transaction in an active period."""

    def ledger_transaction_update(
        self,
        transaction_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Replace one transaction of an active period."""

    def ledger_transaction_delete(self, transaction_id: UUID, actor: ActorContext) -> TransactionMutationResult:
        """Delete one transaction of an active period."""

    def ledger_transaction_list_for_period(self, period_id: UUID) -> list[TransactionRecord]:
        """List transactions of one period."""

    def ledger_transaction_list_for_project(self, project_id: UUID) -> list[TransactionRecord]:
        """List transactions of every period of one project."""

    def ledger_transaction_get(self, transaction_id: UUID) -> TransactionRecord:
        """Fetch one transaction."""
