"""Job-layer period lifecycle workflow with access checks and logging."""

from __future__ import annotations

import logging
from uuid import UUID

from app.db import AuditSinkPort
from app.domain import (
    AccessDeniedError,
    ActorContext,
    LedgerValidationError,
    PeriodRecord,
    PeriodStateError,
    ReconciliationImbalanceError,
    TransactionIntegrityError,
)
from app.ledger import PeriodBalancePreview, PeriodLedgerPort, PeriodTransitionResult

from .audit_forwarding import job_record_access_denied, job_require_admin
from .interfaces import PeriodWorkflowPort

logger = logging.getLogger(__name__)


class PeriodWorkflowService(PeriodWorkflowPort):
    """Run period transitions for callers and log their outcome.

    Every period-changing operation requires the ADMIN role. Refusals are
    recorded through the audit sink; transition events are appended by the
    transition manager inside its own unit of work.
    """

    def __init__(self, period_ledger: PeriodLedgerPort, audit_sink: AuditSinkPort):
        """Initialize period workflow dependencies.

        Args:
            period_ledger: Ledger-layer period transition manager.
            audit_sink: DB-layer audit sink.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are None.
        """

        if period_ledger is None:
            raise ValueError("period_ledger must not be None")
        if audit_sink is None:
            raise ValueError("audit_sink must not be None")
        self._period_ledger = period_ledger
        self._audit_sink = audit_sink

    def job_period_close(self, period_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Close one active period and open its pending successor.

        Args:
            period_id: Period identifier.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Closed period, successor and recorded events.

        Raises:
            AccessDeniedError: Raised when actor is not ADMIN.
            PeriodNotFoundError: Raised when the period does not exist.
            PeriodStateError: Raised when the period is not `ACTIVE`.
            TransactionIntegrityError: Raised when stored transactions are corrupt.
            ReconciliationImbalanceError: Raised when balances do not net to zero.
        """

        job_require_admin(self._audit_sink, actor, "period_close", period_id=period_id)
        try:
            result = self._period_ledger.ledger_period_close(period_id=period_id, actor=actor)
        except ReconciliationImbalanceError as error:
            logger.warning(
                "period close rejected period_id=%s imbalance=%s: %s",
                period_id,
                error.imbalance,
                error,
            )
            raise
        except (PeriodStateError, TransactionIntegrityError) as error:
            logger.warning("period close rejected period_id=%s: %s", period_id, error)
            raise

        logger.info(
            "period closed period_id=%s successor_period_id=%s",
            result.period.period_id,
            result.successor.period_id if result.successor else None,
        )
        return result

    def job_period_name(self, period_id: UUID, name: str, actor: ActorContext) -> PeriodTransitionResult:
        """Name one pending period and activate it.

        Args:
            period_id: Period identifier.
            name: Non-blank period name.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Activated period and recorded events.

        Raises:
            AccessDeniedError: Raised when actor is not ADMIN.
            LedgerValidationError: Raised when name is blank.
            PeriodStateError: Raised when the period is not `PENDING_NAME`.
        """

        job_require_admin(self._audit_sink, actor, "period_name", period_id=period_id)
        try:
            result = self._period_ledger.ledger_period_name(period_id=period_id, name=name, actor=actor)
        except (LedgerValidationError, PeriodStateError) as error:
            logger.warning("period naming rejected period_id=%s: %s", period_id, error)
            raise

        logger.info("period activated period_id=%s name=%s", result.period.period_id, result.period.name)
        return result

    def job_period_bootstrap(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Create the first active period of a project.

        Args:
            project_id: Project identifier.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Bootstrap outcome.

        Raises:
            AccessDeniedError: Raised when actor is not ADMIN.
            ProjectNotFoundError: Raised when the project does not exist.
        """

        job_require_admin(self._audit_sink, actor, "period_bootstrap", project_id=project_id)
        result = self._period_ledger.ledger_period_bootstrap(project_id=project_id, actor=actor)
        if result.created:
            logger.info("opening period created project_id=%s period_id=%s", project_id, result.period.period_id)
        else:
            logger.info("bootstrap skipped project_id=%s: periods already exist", project_id)
        return result

    def job_period_hard_reset(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Force-close open periods and start over from zero balances.

        Args:
            project_id: Project identifier.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Fresh period, force-closed periods and recorded events.

        Raises:
            AccessDeniedError: Raised when actor is not ADMIN.
            ProjectNotFoundError: Raised when the project does not exist.
        """

        try:
            result = self._period_ledger.ledger_period_hard_reset(project_id=project_id, actor=actor)
        except AccessDeniedError as error:
            job_record_access_denied(self._audit_sink, error=error, actor=actor, project_id=project_id)
            raise

        logger.warning(
            "periods hard reset project_id=%s force_closed=%d new_period_id=%s",
            project_id,
            len(result.closed_periods),
            result.period.period_id,
        )
        return result

    def job_period_preview(self, period_id: UUID) -> PeriodBalancePreview:
        """Reconcile one period without writing."""

        return self._period_ledger.ledger_period_preview(period_id)

    def job_period_get(self, period_id: UUID) -> PeriodRecord:
        """Fetch one period."""

        return self._period_ledger.ledger_period_get(period_id)

    def job_period_list_for_project(self, project_id: UUID) -> list[PeriodRecord]:
        """List periods of one project newest first."""

        return self._period_ledger.ledger_period_list_for_project(project_id)
