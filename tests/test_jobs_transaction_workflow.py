"""Transaction and notification workflow tests."""

from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest

from app.domain import (
    AuditEventCategory,
    LedgerValidationError,
    NotificationNotFoundError,
    NotificationStatus,
    PeriodStateError,
    PeriodStatus,
    ProjectNotFoundError,
    TransactionNotFoundError,
)
from app.jobs import NotificationWorkflowService, TransactionWorkflowService
from app.ledger import TransactionDraft, TransactionLedgerService


def _build_workflow(ledger_store, notification_queue) -> TransactionWorkflowService:
    return TransactionWorkflowService(
        transaction_ledger=TransactionLedgerService(ledger_store),
        notification_queue=notification_queue,
    )


def _revenue_draft(amount: str = "250.00") -> TransactionDraft:
    return TransactionDraft(
        transaction_type="REVENUE",
        transaction_date=date(2026, 8, 20),
        description="Rent",
        amount=amount,
        paid_by="P2",
    )


def test_job_transaction_create_records_event_and_queues_notification(
    ledger_store, audit_sink, notification_queue, tx_actor
) -> None:
    """Record TX_CREATED and enqueue one pending notification per created transaction.

    Returns:
        None: Assertions validate event and queued notification.

    Raises:
        AssertionError: Raised when side effects are missing.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)

    result = _build_workflow(ledger_store, notification_queue).job_transaction_create(
        period.period_id,
        _revenue_draft(),
        tx_actor,
    )

    assert [event.category for event in audit_sink.events] == [AuditEventCategory.TX_CREATED]
    queued = list(notification_queue.notifications.values())
    assert len(queued) == 1
    assert queued[0].transaction_id == result.transaction.transaction_id
    assert queued[0].status == NotificationStatus.PENDING


def test_job_transaction_create_rejection_has_no_side_effects(
    ledger_store, audit_sink, notification_queue, tx_actor
) -> None:
    """Leave audit trail and queue empty when the period is closed.

    Returns:
        None: Assertions validate absent side effects.

    Raises:
        AssertionError: Raised when a rejected write leaks side effects.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id, status=PeriodStatus.CLOSED)
    workflow = _build_workflow(ledger_store, notification_queue)

    with pytest.raises(PeriodStateError):
        workflow.job_transaction_create(period.period_id, _revenue_draft(), tx_actor)
    with pytest.raises(LedgerValidationError):
        workflow.job_transaction_create(period.period_id, _revenue_draft(amount="-1"), tx_actor)

    assert audit_sink.events == []
    assert notification_queue.notifications == {}
    assert ledger_store.transactions == {}


def test_job_transaction_update_and_delete_record_events(
    ledger_store, audit_sink, notification_queue, tx_actor
) -> None:
    """Record TX_UPDATED and TX_DELETED without queueing new notifications.

    Returns:
        None: Assertions validate event sequence.

    Raises:
        AssertionError: Raised when the event trail deviates.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)
    workflow = _build_workflow(ledger_store, notification_queue)
    created = workflow.job_transaction_create(period.period_id, _revenue_draft(), tx_actor)

    workflow.job_transaction_update(created.transaction.transaction_id, _revenue_draft(amount="300.00"), tx_actor)
    workflow.job_transaction_delete(created.transaction.transaction_id, tx_actor)

    assert [event.category for event in audit_sink.events] == [
        AuditEventCategory.TX_CREATED,
        AuditEventCategory.TX_UPDATED,
        AuditEventCategory.TX_DELETED,
    ]
    assert len(notification_queue.notifications) == 1
    assert workflow.job_transaction_list_for_period(period.period_id) == []


def test_job_notification_mark_sent_clears_error_and_emits_event(
    notification_queue, audit_sink, admin_actor
) -> None:
    """Mark a pending notification SENT and publish NOTIF_SENT.

    Returns:
        None: Assertions validate updated row and event.

    Raises:
        AssertionError: Raised when delivery bookkeeping deviates.
    """

    pending = notification_queue.db_notification_enqueue_pending(transaction_id=uuid4())
    workflow = NotificationWorkflowService(notification_queue=notification_queue, audit_sink=audit_sink)

    updated = workflow.job_notification_mark(pending.notification_id, NotificationStatus.SENT, "ignored", admin_actor)

    assert updated.status == NotificationStatus.SENT
    assert updated.last_error is None
    assert updated.sent_at_utc is not None
    assert [event.category for event in audit_sink.events] == [AuditEventCategory.NOTIF_SENT]
    assert audit_sink.events[0].transaction_id == pending.transaction_id
    assert audit_sink.events[0].metadata == {"notification_id": str(pending.notification_id), "last_error": None}


def test_job_notification_mark_failed_keeps_error(notification_queue, audit_sink, admin_actor) -> None:
    """Mark a notification FAILED and keep the delivery error.

    Returns:
        None: Assertions validate stored error and event.

    Raises:
        AssertionError: Raised when the failure is not recorded.
    """

    pending = notification_queue.db_notification_enqueue_pending(transaction_id=uuid4())
    workflow = NotificationWorkflowService(notification_queue=notification_queue, audit_sink=audit_sink)

    updated = workflow.job_notification_mark(
        pending.notification_id,
        NotificationStatus.FAILED,
        "smtp timeout",
        admin_actor,
    )

    assert updated.last_error == "smtp timeout"
    assert audit_sink.events[0].category == AuditEventCategory.NOTIF_FAILED


def test_job_notification_mark_rejects_pending_and_unknown(notification_queue, audit_sink, admin_actor) -> None:
    """Reject PENDING as an outcome and unknown notification ids.

    Returns:
        None: Assertions validate errors and empty audit trail.

    Raises:
        AssertionError: Raised when invalid marks are accepted.
    """

    workflow = NotificationWorkflowService(notification_queue=notification_queue, audit_sink=audit_sink)
    unknown_id = uuid4()

    with pytest.raises(LedgerValidationError) as error_info:
        workflow.job_notification_mark(unknown_id, NotificationStatus.PENDING, None, admin_actor)
    with pytest.raises(NotificationNotFoundError):
        workflow.job_notification_mark(unknown_id, NotificationStatus.SENT, None, admin_actor)

    assert error_info.value.field == "status"
    assert audit_sink.events == []



def test_job_transaction_create_rolls_back_when_audit_append_fails(
    ledger_store, audit_sink, notification_queue, tx_actor
) -> None:
    """Keep the transaction, event and notification out when the event insert fails.

    Returns:
        None: Assertions validate the rolled back unit of work.

    Raises:
        AssertionError: Raised when a write commits without its event.
    """

    project = ledger_store.store_add_project()
    period = ledger_store.store_add_period(project.project_id)
    ledger_store.fail_audit_append = True

    with pytest.raises(RuntimeError):
        _build_workflow(ledger_store, notification_queue).job_transaction_create(
            period.period_id,
            _revenue_draft(),
            tx_actor,
        )

    assert ledger_store.transactions == {}
    assert ledger_store.rolled_back_units == 1
    assert audit_sink.events == []
    assert notification_queue.notifications == {}


def test_job_transaction_get_and_project_listing(ledger_store, notification_queue, tx_actor) -> None:
    """Fetch one transaction and list a project's transactions across periods.

    Returns:
        None: Assertions validate read results and not-found errors.

    Raises:
        AssertionError: Raised when reads deviate.
    """

    project = ledger_store.store_add_project()
    closed = ledger_store.store_add_period(project.project_id, status=PeriodStatus.CLOSED, name="Q2")
    older = ledger_store.store_add_transaction(closed, "EXPENSE", "80.00", paid_by="P1")
    active = ledger_store.store_add_period(project.project_id, name="Q3")
    workflow = _build_workflow(ledger_store, notification_queue)
    created = workflow.job_transaction_create(active.period_id, _revenue_draft(), tx_actor)

    fetched = workflow.job_transaction_get(created.transaction.transaction_id)
    listed = workflow.job_transaction_list_for_project(project.project_id)

    assert fetched == created.transaction
    assert [transaction.transaction_id for transaction in listed] == [
        created.transaction.transaction_id,
        older.transaction_id,
    ]
    with pytest.raises(TransactionNotFoundError):
        workflow.job_transaction_get(uuid4())
    with pytest.raises(ProjectNotFoundError):
        workflow.job_transaction_list_for_project(uuid4())
