"""Balance reconciliation: profit split, ending balances and zero-sum check."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.domain import LedgerValidationError, Partner, ReconciliationImbalanceError

from .aggregation import PeriodAggregate

ZERO_SUM_TOLERANCE = Decimal("0.01")
BALANCE_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class ReconciliationResult:
    """Reconciliation output for one period.

    Attributes:
        net_profit: Total revenues minus total expenses.
        profit_share: Equal per-partner share of net profit.
        computed_balances: Unrounded ending balance per partner.
        ending_balances: Ending balance per partner rounded to cents for storage.
        imbalance: Sum of unrounded ending balances.
        balanced: Whether the imbalance is within tolerance.
    """

    net_profit: Decimal
    profit_share: Decimal
    computed_balances: Mapping[Partner, Decimal]
    ending_balances: Mapping[Partner, Decimal]
    imbalance: Decimal
    balanced: bool


def ledger_reconcile_balances(
    aggregate: PeriodAggregate,
    starting_balances: Mapping[Partner, Decimal],
    tolerance: Decimal = ZERO_SUM_TOLERANCE,
) -> ReconciliationResult:
    """Turn period aggregates into ending balances and a zero-sum verdict.

    Intermediate values stay unrounded; only the stored ending balances are
    quantized. Half-up rounding is symmetric around zero, so two exactly
    opposite balances stay exactly opposite after rounding.

    Args:
        aggregate: Aggregation output of the period.
        starting_balances: Opening balance per partner.
        tolerance: Maximum accepted absolute imbalance.

    Returns:
        ReconciliationResult: Balances and verdict; never raises for imbalance.

    Raises:
        LedgerValidationError: Raised when a partner starting balance is missing or tolerance is negative.
    """

    if tolerance < 0:
        raise LedgerValidationError("tolerance must be >= 0", field="tolerance")
    missing_partners = [partner.value for partner in Partner if partner not in starting_balances]
    if missing_partners:
        raise LedgerValidationError(
            f"starting_balances missing partners: {', '.join(missing_partners)}",
            field="starting_balances",
        )

    net_profit = aggregate.total_revenues - aggregate.total_expenses
    profit_share = net_profit / Decimal(len(Partner))

    computed_balances: dict[Partner, Decimal] = {}
    for partner in Partner:
        partner_aggregate = aggregate.partners[partner]
        computed_balances[partner] = (
            Decimal(starting_balances[partner]) + partner_aggregate.aggregate_net_contribution() + profit_share
        )

    imbalance = sum(computed_balances.values(), Decimal("0"))
    return ReconciliationResult(
        net_profit=net_profit,
        profit_share=profit_share,
        computed_balances=computed_balances,
        ending_balances={
            partner: ledger_round_balance(balance) for partner, balance in computed_balances.items()
        },
        imbalance=imbalance,
        balanced=abs(imbalance) <= tolerance,
    )


def ledger_raise_for_imbalance(result: ReconciliationResult) -> None:
    """Raise when a reconciliation result failed the zero-sum check.

    Args:
        result: Reconciliation output.

    Returns:
        None: Returns only when balanced.

    Raises:
        ReconciliationImbalanceError: Raised when balances do not net to zero.
    """

    if not result.balanced:
        raise ReconciliationImbalanceError(ending_balances=result.computed_balances, imbalance=result.imbalance)


def ledger_round_balance(amount: Decimal) -> Decimal:
    """Quantize one balance to cents using half-up rounding."""

    return Decimal(amount).quantize(BALANCE_QUANTUM, rounding=ROUND_HALF_UP)
