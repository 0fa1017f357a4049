"""Project-native typed exceptions for period ledger failures."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal

from .models import Partner


class LedgerError(Exception):
    """Base exception for ledger-level failures.

    Attributes:
        error_code: Stable machine-readable error code.
    """

    error_code = "LEDGER_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        if error_code is not None:
            self.error_code = error_code


class LedgerValidationError(LedgerError, ValueError):
    """Input shape failure; names the violated field."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class TransactionIntegrityError(LedgerValidationError):
    """Stored transaction data that cannot be aggregated (unknown type, missing actor)."""

    error_code = "TRANSACTION_INTEGRITY"


class PeriodStateError(LedgerError, RuntimeError):
    """Operation rejected because the period is not in the required status."""

    error_code = "PERIOD_STATE"

    def __init__(self, message: str, expected_status: str | None = None, actual_status: str | None = None):
        super().__init__(message)
        self.expected_status = expected_status
        self.actual_status = actual_status


class ReconciliationImbalanceError(LedgerError, RuntimeError):
    """Computed ending balances do not net to zero within tolerance.

    Attributes:
        ending_balances: Unrounded computed ending balance per partner.
        imbalance: Sum of all ending balances.
    """

    error_code = "RECONCILIATION_IMBALANCE"

    def __init__(self, ending_balances: Mapping[Partner, Decimal], imbalance: Decimal):
        rendered_balances = ", ".join(
            f"{partner.value}={_format_amount(amount)}" for partner, amount in ending_balances.items()
        )
        super().__init__(
            f"period balances do not net to zero: {rendered_balances}, imbalance={_format_amount(imbalance)}"
        )
        self.ending_balances = dict(ending_balances)
        self.imbalance = imbalance


class PeriodNotFoundError(LedgerError, LookupError):
    """Referenced period does not exist."""

    error_code = "NOT_FOUND"


class ProjectNotFoundError(LedgerError, LookupError):
    """Referenced project does not exist."""

    error_code = "NOT_FOUND"


class TransactionNotFoundError(LedgerError, LookupError):
    """Referenced transaction does not exist."""

    error_code = "NOT_FOUND"


class NotificationNotFoundError(LedgerError, LookupError):
    """Referenced notification does not exist."""

    error_code = "NOT_FOUND"


class AccessDeniedError(LedgerError, PermissionError):
    """Caller role is not allowed to run the requested operation."""

    error_code = "ACCESS_DENIED"

    def __init__(self, message: str, operation: str):
        super().__init__(message)
        self.operation = operation


def _format_amount(amount: Decimal) -> str:
    return f"{amount.quantize(Decimal('0.01'))}"
