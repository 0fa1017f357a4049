"""Transaction write gate tests: draft validation and active-period enforcement."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from app.domain import (
    AuditEventCategory,
    LedgerValidationError,
    Partner,
    PeriodNotFoundError,
    PeriodStateError,
    PeriodStatus,
    TransactionNotFoundError,
    TransactionType,
)
from app.ledger import TransactionDraft, TransactionLedgerService, ledger_validate_transaction_draft


def _expense_draft(**overrides) -> TransactionDraft:
    values = {
        "transaction_type": "EXPENSE",
        "transaction_date": date(2026, 8, 1),
        "description": "Tiles",
        "amount": "1200.00",
        "paid_by": "P1",
    }
    values.update(overrides)
    return TransactionDraft(**values)


def test_transaction_draft_validation_normalizes_valid_settlement() -> None:
    """Normalize a settlement draft into typed write values.

    Returns:
        None: Assertions validate normalized fields.

    Raises:
        AssertionError: Raised when normalization deviates.
    """

    request = ledger_validate_transaction_draft(
        TransactionDraft(
            transaction_type="SETTLEMENT",
            transaction_date=date(2026, 8, 2),
            description="  Transfer  ",
            amount="500",
            from_partner="P1",
            to_partner="P2",
        )
    )

    assert request.transaction_type == TransactionType.SETTLEMENT
    assert request.description == "Transfer"
    assert request.amount == Decimal("500")
    assert request.paid_by is None
    assert request.from_partner == Partner.P1
    assert request.to_partner == Partner.P2


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"transaction_type": "REFUND"}, "transaction_type"),
        ({"description": "   "}, "description"),
        ({"amount": "0"}, "amount"),
        ({"amount": "-5"}, "amount"),
        ({"amount": "abc"}, "amount"),
        ({"amount": "NaN"}, "amount"),
        ({"amount": "1.005"}, "amount"),
        ({"paid_by": None}, "paid_by"),
        ({"paid_by": "P3"}, "paid_by"),
        ({"to_partner": "P2"}, "to_partner"),
        (
            {"transaction_type": "SETTLEMENT", "paid_by": None, "from_partner": "P1", "to_partner": "P1"},
            "to_partner",
        ),
        ({"transaction_type": "SETTLEMENT", "paid_by": None, "to_partner": "P2"}, "from_partner"),
        ({"transaction_type": "SETTLEMENT", "from_partner": "P1", "to_partner": "P2"}, "paid_by"),
    ],
)
def test_transaction_draft_validation_rejects_invalid_fields(overrides, field) -> None:
    """Reject malformed drafts and name the offending field.

    Returns:
        None: Assertions validate the reported field.

    Raises:
        AssertionError: Raised when an invalid draft passes validation.
    """

    with pytest.raises(LedgerValidationError) as error_info:
        ledger_validate_transaction_draft(_expense_draft(**overrides))

    assert error_info.value.field == field


def test_transaction_draft_validation_rejects_self_settlement_message() -> None:
    """Report that a settlement destination must differ from its source.

    Returns:
        None: Assertions validate message text.

    Raises:
        AssertionError: Raised when self-settlement is accepted.
    """

    with pytest.raises(LedgerValidationError, match="to_partner must differ from from_partner"):
        ledger_validate_transaction_draft(
            _expense_draft(transaction_type="SETTLEMENT", paid_by=None, from_partner="P2", to_partner="P2")
        )


def test_transaction_create_records_row_and_event(ledger_store, tx_actor) -> None:
    """Insert a transaction into an ACTIVE period under a shared period lock.

    Returns:
        None: Assertions validate stored row, lock and event.

    Raises:
        AssertionError: Raised when the write deviates.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)

    result = TransactionLedgerService(ledger_store).ledger_transaction_create(period.period_id, _expense_draft(), tx_actor)

    assert ledger_store.transactions[result.transaction.transaction_id] == result.transaction
    assert result.transaction.project_id == project.project_id
    assert result.transaction.created_by == tx_actor.actor_id
    assert ("share", period.period_id) in ledger_store.lock_calls
    assert [event.category for event in result.events] == [AuditEventCategory.TX_CREATED]
    assert result.events[0].transaction_id == result.transaction.transaction_id


@pytest.mark.parametrize("status", [PeriodStatus.CLOSED, PeriodStatus.PENDING_NAME])
def test_transaction_create_rejects_non_active_period(ledger_store, tx_actor, status) -> None:
    """Reject writes into CLOSED and PENDING_NAME periods without storing anything.

    Returns:
        None: Assertions validate state error and empty store.

    Raises:
        AssertionError: Raised when a non-active period accepts a write.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id, status=status, name="")

    with pytest.raises(PeriodStateError):
        TransactionLedgerService(ledger_store).ledger_transaction_create(period.period_id, _expense_draft(), tx_actor)

    assert ledger_store.transactions == {}


def test_transaction_create_validates_before_reading_period(ledger_store, tx_actor) -> None:
    """Fail validation without opening a unit of work.

    Returns:
        None: Assertions validate that no unit of work ran.

    Raises:
        AssertionError: Raised when validation happens after store access.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)

    with pytest.raises(LedgerValidationError):
        TransactionLedgerService(ledger_store).ledger_transaction_create(
            period.period_id,
            _expense_draft(amount="0"),
            tx_actor,
        )

    assert ledger_store.committed_units == 0
    assert ledger_store.rolled_back_units == 0


def test_transaction_update_replaces_values_and_keeps_before_image(ledger_store, tx_actor) -> None:
    """Replace a transaction and record before and after images.

    Returns:
        None: Assertions validate updated row and event metadata.

    Raises:
        AssertionError: Raised when update deviates.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)
    existing = ledger_store.store_add_transaction(period, TransactionType.EXPENSE, "10.00", paid_by=Partner.P1)

    result = TransactionLedgerService(ledger_store).ledger_transaction_update(
        existing.transaction_id,
        _expense_draft(amount="25.50", paid_by="P2"),
        tx_actor,
    )

    assert result.transaction.amount == Decimal("25.50")
    assert result.transaction.paid_by == Partner.P2
    assert result.events[0].category == AuditEventCategory.TX_UPDATED
    assert set(result.events[0].metadata) == {"before", "after"}


def test_transaction_update_rejects_closed_period(ledger_store, tx_actor) -> None:
    """Keep transactions of a CLOSED period immutable.

    Returns:
        None: Assertions validate state error and unchanged row.

    Raises:
        AssertionError: Raised when a closed period's transaction changes.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id, status=PeriodStatus.CLOSED)
    existing = ledger_store.store_add_transaction(period, TransactionType.EXPENSE, "10.00", paid_by=Partner.P1)

    with pytest.raises(PeriodStateError):
        TransactionLedgerService(ledger_store).ledger_transaction_update(
            existing.transaction_id,
            _expense_draft(),
            tx_actor,
        )

    assert ledger_store.transactions[existing.transaction_id] == existing


def test_transaction_delete_returns_removed_row(ledger_store, tx_actor) -> None:
    """Delete one transaction of an ACTIVE period and report it.

    Returns:
        None: Assertions validate removal and event.

    Raises:
        AssertionError: Raised when delete deviates.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)
    existing = ledger_store.store_add_transaction(period, TransactionType.REVENUE, "99.99", paid_by=Partner.P2)
    service = TransactionLedgerService(ledger_store)

    result = service.ledger_transaction_delete(existing.transaction_id, tx_actor)

    assert result.transaction == existing
    assert existing.transaction_id not in ledger_store.transactions
    assert result.events[0].category == AuditEventCategory.TX_DELETED
    with pytest.raises(TransactionNotFoundError):
        service.ledger_transaction_delete(existing.transaction_id, tx_actor)


def test_transaction_list_requires_existing_period(ledger_store) -> None:
    """List period transactions and reject unknown periods.

    Returns:
        None: Assertions validate listing and not-found error.

    Raises:
        AssertionError: Raised when listing deviates.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)
    existing = ledger_store.store_add_transaction(period, TransactionType.EXPENSE, "5.00", paid_by=Partner.P1)
    other = ledger_store.store_add_period(project.project_id, status=PeriodStatus.CLOSED)
    del ledger_store.periods[other.period_id]
    service = TransactionLedgerService(ledger_store)

    assert service.ledger_transaction_list_for_period(period.period_id) == [existing]
    with pytest.raises(PeriodNotFoundError):
        service.ledger_transaction_list_for_period(other.period_id)
