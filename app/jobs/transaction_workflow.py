"""Job-layer transaction workflow with logging and notification queueing."""

from __future__ import annotations

import logging
from uuid import UUID

from app.db import NotificationQueuePort
from app.domain import ActorContext, LedgerValidationError, PeriodStateError, TransactionRecord
from app.ledger import TransactionDraft, TransactionLedgerPort, TransactionMutationResult

from .interfaces import TransactionWorkflowPort

logger = logging.getLogger(__name__)


class TransactionWorkflowService(TransactionWorkflowPort):
    """Run gated transaction writes and queue their notifications.

    Audit events are appended by the transaction gate inside its unit of work.
    """

    def __init__(
        self,
        transaction_ledger: TransactionLedgerPort,
        notification_queue: NotificationQueuePort,
    ):
        """Initialize transaction workflow dependencies.

        Args:
            transaction_ledger: Ledger-layer transaction gate.
            notification_queue: DB-layer notification queue.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are None.
        """

        if transaction_ledger is None:
            raise ValueError("transaction_ledger must not be None")
        if notification_queue is None:
            raise ValueError("notification_queue must not be None")
        self._transaction_ledger = transaction_ledger
        self._notification_queue = notification_queue

    def job_transaction_create(
        self,
        period_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Record one transaction, record `TX_CREATED` and queue a notification.

        Args:
            period_id: Owning period identifier.
            draft: Unvalidated transaction input.
            actor: Caller context.

        Returns:
            TransactionMutationResult: Inserted row and its events.

        Raises:
            LedgerValidationError: Raised when draft fields are invalid.
            PeriodNotFoundError: Raised when the period does not exist.
            PeriodStateError: Raised when the period is not `ACTIVE`.
            RuntimeError: Raised when audit or notification persistence fails.
        """

        try:
            result = self._transaction_ledger.ledger_transaction_create(period_id=period_id, draft=draft, actor=actor)
        except (LedgerValidationError, PeriodStateError) as error:
            logger.warning("transaction create rejected period_id=%s: %s", period_id, error)
            raise

        notification = self._notification_queue.db_notification_enqueue_pending(result.transaction.transaction_id)
        logger.info(
            "transaction created transaction_id=%s period_id=%s notification_id=%s",
            result.transaction.transaction_id,
            period_id,
            notification.notification_id,
        )
        return result

    def job_transaction_update(
        self,
        transaction_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Replace one transaction and record `TX_UPDATED`.

        Args:
            transaction_id: Transaction identifier.
            draft: Unvalidated replacement values.
            actor: Caller context.

        Returns:
            TransactionMutationResult: Updated row and its events.

        Raises:
            LedgerValidationError: Raised when draft fields are invalid.
            TransactionNotFoundError: Raised when the transaction does not exist.
            PeriodStateError: Raised when the owning period is not `ACTIVE`.
        """

        try:
            result = self._transaction_ledger.ledger_transaction_update(
                transaction_id=transaction_id,
                draft=draft,
                actor=actor,
            )
        except (LedgerValidationError, PeriodStateError) as error:
            logger.warning("transaction update rejected transaction_id=%s: %s", transaction_id, error)
            raise

        logger.info("transaction updated transaction_id=%s", transaction_id)
        return result

    def job_transaction_delete(self, transaction_id: UUID, actor: ActorContext) -> TransactionMutationResult:
        """Delete one transaction and record `TX_DELETED`.

        Args:
            transaction_id: Transaction identifier.
            actor: Caller context.

        Returns:
            TransactionMutationResult: Removed row and its events.

        Raises:
            TransactionNotFoundError: Raised when the transaction does not exist.
            PeriodStateError: Raised when the owning period is not `ACTIVE`.
        """

        try:
            result = self._transaction_ledger.ledger_transaction_delete(transaction_id=transaction_id, actor=actor)
        except PeriodStateError as error:
            logger.warning("transaction delete rejected transaction_id=%s: %s", transaction_id, error)
            raise

        logger.info("transaction deleted transaction_id=%s", transaction_id)
        return result

    def job_transaction_list_for_period(self, period_id: UUID) -> list[TransactionRecord]:
        """List transactions of one period."""

        return self._transaction_ledger.ledger_transaction_list_for_period(period_id)

    def job_transaction_list_for_project(self, project_id: UUID) -> list[TransactionRecord]:
        """List transactions of every period of one project."""

        return self._transaction_ledger.ledger_transaction_list_for_project(project_id)

    def job_transaction_get(self, transaction_id: UUID) -> TransactionRecord:
        """Fetch one transaction."""

        return self._transaction_ledger.ledger_transaction_get(transaction_id)
