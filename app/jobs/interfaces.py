"""Typed interfaces for job-layer orchestration responsibilities."""

from typing import Protocol
from uuid import UUID

from app.domain import ActorContext, NotificationRecord, NotificationStatus, PeriodRecord, TransactionRecord
from app.ledger import PeriodBalancePreview, PeriodTransitionResult, TransactionDraft, TransactionMutationResult


class PeriodWorkflowPort(Protocol):
    """Port definition for period lifecycle workflows."""

    def job_period_close(self, period_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Close one active period and open its pending successor.

        Args:
            period_id: Period identifier.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Transition outcome.

        Raises:
            AccessDeniedError: Raised when actor is not ADMIN.
            PeriodStateError: Raised when the period is not `ACTIVE`.
            ReconciliationImbalanceError: Raised when balances do not net to zero.
        """

    def job_period_name(self, period_id: UUID, name: str, actor: ActorContext) -> PeriodTransitionResult:
        """Name one pending period and activate it.

        Args:
            period_id: Period identifier.
            name: Non-blank period name.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Transition outcome.

        Raises:
            LedgerValidationError: Raised when name is blank.
            PeriodStateError: Raised when the period is not `PENDING_NAME`.
        """

    def job_period_bootstrap(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Create the first active period of a project.

        Args:
            project_id: Project identifier.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Bootstrap outcome; `created` is False when periods existed.

        Raises:
            ProjectNotFoundError: Raised when the project does not exist.
        """

    def job_period_hard_reset(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Force-close open periods and start over from zero balances.

        Args:
            project_id: Project identifier.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Reset outcome.

        Raises:
            AccessDeniedError: Raised when actor is not ADMIN.
        """

    def job_period_preview(self, period_id: UUID) -> PeriodBalancePreview:
        """Reconcile one period without writing."""

    def job_period_get(self, period_id: UUID) -> PeriodRecord:
        """Fetch one period."""

    def job_period_list_for_project(self, project_id: UUID) -> list[PeriodRecord]:
        """List periods of one project newest first."""


class TransactionWorkflowPort(Protocol):
    """Port definition for transaction workflows."""

    def job_transaction_create(
        self,
        period_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Record one transaction and queue its notification.

        Args:
            period_id: Owning period identifier.
            draft: Unvalidated transaction input.
            actor: Caller context.

        Returns:
            TransactionMutationResult: Inserted row and its events.

        Raises:
            LedgerValidationError: Raised when draft fields are invalid.
            PeriodStateError: Raised when the period is not `ACTIVE`.
        """

    def job_transaction_update(
        self,
        transaction_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Replace one transaction of an active period."""

    def job_transaction_delete(self, transaction_id: UUID, actor: ActorContext) -> TransactionMutationResult:
        """Delete one transaction of an active period."""

    def job_transaction_list_for_period(self, period_id: UUID) -> list[TransactionRecord]:
        """List transactions of one period."""

    def job_transaction_list_for_project(self, project_id: UUID) -> list[TransactionRecord]:
        """List transactions of every period of one project."""

    def job_transaction_get(self, transaction_id: UUID) -> TransactionRecord:
        """Fetch one transaction."""


class NotificationWorkflowPort(Protocol):
    """Port definition for notification delivery bookkeeping."""

    def job_notification_mark(
        self,
        notification_id: UUID,
        status: NotificationStatus,
        last_error: str | None,
        actor: ActorContext,
    ) -> NotificationRecord:
        """Record the delivery outcome of one notification.

        Args:
            notification_id: Notification identifier.
            status: `SENT` or `FAILED`.
            last_error: Optional failure message.
            actor: Caller context.

        Returns:
            NotificationRecord: Updated notification.

        Raises:
            LedgerValidationError: Raised when status is not a delivery outcome.
            NotificationNotFoundError: Raised when the notification does not exist.
        """

    def job_notification_list(
        self,
        limit: int,
        offset: int,
        status: NotificationStatus | None = None,
    ) -> list[NotificationRecord]:
        """List notifications newest first."""
