"""Period transaction aggregation primitives."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from app.domain import Partner, TransactionIntegrityError, TransactionRecord, TransactionType


@dataclass(frozen=True)
class PartnerAggregate:
    """Per-partner sums for one period.

    Attributes:
        expenses_paid: Expenses the partner paid on behalf of the pool.
        revenues_received: Revenues the partner collected for the pool.
        settlements_paid: Settlements the partner paid to the other partner.
        settlements_received: Settlements the partner received from the other partner.
    """

    expenses_paid: Decimal = Decimal("0")
    revenues_received: Decimal = Decimal("0")
    settlements_paid: Decimal = Decimal("0")
    settlements_received: Decimal = Decimal("0")

    def aggregate_net_contribution(self) -> Decimal:
        """Return the partner's net position change before profit share.

        Returns:
            Decimal: Expenses and settlements paid minus revenues and settlements received.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return self.expenses_paid - self.revenues_received + self.settlements_paid - self.settlements_received


@dataclass(frozen=True)
class PeriodAggregate:
    """Aggregation output for one period.

    Attributes:
        partners: Per-partner sums keyed by partner.
        total_expenses: Period-wide expense total.
        total_revenues: Period-wide revenue total.
        unattributed_amount: Settlement legs that could not be credited to a distinct counterparty.
        transaction_count: Number of transactions aggregated.
    """

    partners: Mapping[Partner, PartnerAggregate]
    total_expenses: Decimal
    total_revenues: Decimal
    unattributed_amount: Decimal
    transaction_count: int


@dataclass
class _PartnerTotals:
    """Mutable accumulator used during one aggregation pass."""

    expenses_paid: Decimal = Decimal("0")
    revenues_received: Decimal = Decimal("0")
    settlements_paid: Decimal = Decimal("0")
    settlements_received: Decimal = Decimal("0")


def ledger_aggregate_period_transactions(transactions: Iterable[TransactionRecord]) -> PeriodAggregate:
    """Aggregate one period's transactions into per-partner and period-wide sums.

    Sums are exact decimal additions, so the result does not depend on input
    order. A settlement whose destination equals its source has no
    counterparty; its incoming leg is kept in `unattributed_amount`.

    Args:
        transactions: All transactions of one period in any order.

    Returns:
        PeriodAggregate: Deterministic aggregation output.

    Raises:
        TransactionIntegrityError: Raised for unknown types or missing actor fields.
    """

    totals = {partner: _PartnerTotals() for partner in Partner}
    total_expenses = Decimal("0")
    total_revenues = Decimal("0")
    unattributed_amount = Decimal("0")
    transaction_count = 0

    for transaction in transactions:
        transaction_count += 1
        amount = Decimal(transaction.amount)
        transaction_type = _aggregation_resolve_type(transaction)

        if transaction_type == TransactionType.EXPENSE:
            paid_by = _aggregation_require_partner(transaction, "paid_by")
            total_expenses += amount
            totals[paid_by].expenses_paid += amount
        elif transaction_type == TransactionType.REVENUE:
            paid_by = _aggregation_require_partner(transaction, "paid_by")
            total_revenues += amount
            totals[paid_by].revenues_received += amount
        else:
            from_partner = _aggregation_require_partner(transaction, "from_partner")
            to_partner = _aggregation_require_partner(transaction, "to_partner")
            totals[from_partner].settlements_paid += amount
            if to_partner == from_partner:
                unattributed_amount += amount
            else:
                totals[to_partner].settlements_received += amount

    return PeriodAggregate(
        partners={
            partner: PartnerAggregate(
                expenses_paid=partner_totals.expenses_paid,
                revenues_received=partner_totals.revenues_received,
                settlements_paid=partner_totals.settlements_paid,
                settlements_received=partner_totals.settlements_received,
            )
            for partner, partner_totals in totals.items()
        },
        total_expenses=total_expenses,
        total_revenues=total_revenues,
        unattributed_amount=unattributed_amount,
        transaction_count=transaction_count,
    )


def _aggregation_resolve_type(transaction: TransactionRecord) -> TransactionType:
    """Resolve transaction type or raise integrity error for unknown values."""

    try:
        return TransactionType(transaction.transaction_type)
    except ValueError as error:
        raise TransactionIntegrityError(
            f"transaction {transaction.transaction_id} has unknown type {transaction.transaction_type!r}",
            field="transaction_type",
        ) from error


def _aggregation_require_partner(transaction: TransactionRecord, field_name: str) -> Partner:
    """Return one required actor field as partner or raise integrity error."""

    value = getattr(transaction, field_name)
    if value is None:
        raise TransactionIntegrityError(
            f"transaction {transaction.transaction_id} of type {transaction.transaction_type} is missing {field_name}",
            field=field_name,
        )
    try:
        return Partner(value)
    except ValueError as error:
        raise TransactionIntegrityError(
            f"transaction {transaction.transaction_id} references unknown partner {value!r} in {field_name}",
            field=field_name,
        ) from error
