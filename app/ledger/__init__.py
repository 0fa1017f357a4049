"""Ledger layer package for aggregation, reconciliation and period transitions."""

from .aggregation import PartnerAggregate, PeriodAggregate, ledger_aggregate_period_transactions
from .interfaces import (
	PeriodBalancePreview,
	PeriodLedgerPort,
	PeriodTransitionResult,
	TransactionDraft,
	TransactionLedgerPort,
	TransactionMutationResult,
)
from .period_transition import (
	OPEN_PERIOD_STATUSES,
	PeriodTransitionConfig,
	PeriodTransitionManager,
	ledger_append_audit_events,
	ledger_require_period_status,
)
from .reconciliation import (
	ZERO_SUM_TOLERANCE,
	ReconciliationResult,
	ledger_raise_for_imbalance,
	ledger_reconcile_balances,
	ledger_round_balance,
)
from .transaction_gate import TransactionLedgerService, ledger_validate_transaction_draft

__all__ = [
	"PartnerAggregate",
	"PeriodAggregate",
	"ledger_aggregate_period_transactions",
	"ZERO_SUM_TOLERANCE",
	"ReconciliationResult",
	"ledger_reconcile_balances",
	"ledger_raise_for_imbalance",
	"ledger_round_balance",
	"PeriodBalancePreview",
	"PeriodLedgerPort",
	"PeriodTransitionResult",
	"TransactionDraft",
	"TransactionLedgerPort",
	"TransactionMutationResult",
	"OPEN_PERIOD_STATUSES",
	"PeriodTransitionConfig",
	"PeriodTransitionManager",
	"ledger_append_audit_events",
	"ledger_require_period_status",
	"TransactionLedgerService",
	"ledger_validate_transaction_draft",
]
