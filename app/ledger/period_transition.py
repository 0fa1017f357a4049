"""Period transition manager: atomic close-and-open, naming, bootstrap and reset."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from app.db import (
    PERIOD_LOCK_UPDATE,
    LedgerSessionPort,
    LedgerUnitOfWorkPort,
    PeriodCreateRequest,
    PeriodStatusUpdate,
)
from app.domain import (
    AccessDeniedError,
    ActorContext,
    AuditEvent,
    AuditEventCategory,
    LedgerValidationError,
    PeriodNotFoundError,
    PeriodRecord,
    PeriodStateError,
    PeriodStatus,
    ProjectNotFoundError,
    domain_build_audit_event,
    domain_serialize_balances,
    domain_zero_balances,
)

from .aggregation import ledger_aggregate_period_transactions
from .interfaces import PeriodBalancePreview, PeriodLedgerPort, PeriodTransitionResult
from .reconciliation import ZERO_SUM_TOLERANCE, ledger_raise_for_imbalance, ledger_reconcile_balances

OPEN_PERIOD_STATUSES = (PeriodStatus.ACTIVE, PeriodStatus.PENDING_NAME)


@dataclass(frozen=True)
class PeriodTransitionConfig:
    """Configuration values for period transitions.

    Attributes:
        opening_period_name: Name of bootstrap and hard-reset periods.
        reconciliation_tolerance: Maximum absolute zero-sum deviation accepted at close.
    """

    opening_period_name: str = "Opening period"
    reconciliation_tolerance: Decimal = ZERO_SUM_TOLERANCE


class PeriodTransitionManager(PeriodLedgerPort):
    """Run every period state transition inside one unit of work.

    Audit events are appended through the same session, so a transition and
    its events commit or roll back together. Operations also return the events
    for callers that report them.
    """

    def __init__(
        self,
        unit_of_work: LedgerUnitOfWorkPort,
        config: PeriodTransitionConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize transition manager dependencies.

        Args:
            unit_of_work: DB-layer unit-of-work factory.
            config: Optional transition configuration.
            clock: Optional UTC clock, used by tests to pin dates.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if unit_of_work is None:
            raise ValueError("unit_of_work must not be None")
        resolved_config = config or PeriodTransitionConfig()
        if not resolved_config.opening_period_name.strip():
            raise ValueError("config.opening_period_name must not be blank")
        if resolved_config.reconciliation_tolerance < 0:
            raise ValueError("config.reconciliation_tolerance must be >= 0")

        self._unit_of_work = unit_of_work
        self._config = resolved_config
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def ledger_period_close(self, period_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Reconcile one active period, close it and open its pending successor.

        Args:
            period_id: Period identifier.
            actor: Caller context recorded in audit events.

        Returns:
            PeriodTransitionResult: Closed period, successor and events
            (`PERIOD_CLOSED`, then `PERIOD_OPENED`).

        Raises:
            PeriodNotFoundError: Raised when the period does not exist.
            PeriodStateError: Raised when the period is not `ACTIVE`.
            TransactionIntegrityError: Raised when stored transactions cannot be aggregated.
            ReconciliationImbalanceError: Raised when balances do not net to zero.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            period = self._ledger_lock_period(session=session, period_id=period_id)
            ledger_require_period_status(period, PeriodStatus.ACTIVE, "close")

            transactions = session.db_transaction_list_by_period(period_id)
            aggregate = ledger_aggregate_period_transactions(transactions)
            reconciliation = ledger_reconcile_balances(
                aggregate=aggregate,
                starting_balances=period.starting_balances,
                tolerance=self._config.reconciliation_tolerance,
            )
            ledger_raise_for_imbalance(reconciliation)

            closed_at_utc = self._clock()
            closed_period = session.db_period_update_status_and_balances(
                period_id=period_id,
                expected_status=PeriodStatus.ACTIVE,
                update=PeriodStatusUpdate(
                    status=PeriodStatus.CLOSED,
                    end_date=closed_at_utc.date(),
                    ending_balances=reconciliation.ending_balances,
                    closed_at_utc=closed_at_utc,
                ),
            )
            if closed_period is None:
                raise PeriodStateError(
                    f"period {period_id} is already closed",
                    expected_status=PeriodStatus.ACTIVE.value,
                    actual_status=PeriodStatus.CLOSED.value,
                )

            successor = session.db_period_create(
                PeriodCreateRequest(
                    project_id=closed_period.project_id,
                    name="",
                    start_date=closed_period.end_date or closed_at_utc.date(),
                    status=PeriodStatus.PENDING_NAME,
                    starting_balances=closed_period.ending_balances or reconciliation.ending_balances,
                )
            )

            events = (
                domain_build_audit_event(
                    category=AuditEventCategory.PERIOD_CLOSED,
                    message=f"Period closed: {closed_period.name}",
                    project_id=closed_period.project_id,
                    period_id=closed_period.period_id,
                    actor_id=actor.actor_id,
                    metadata={
                        "starting_balances": domain_serialize_balances(closed_period.starting_balances),
                        "ending_balances": domain_serialize_balances(closed_period.ending_balances),
                        "total_expenses": str(aggregate.total_expenses),
                        "total_revenues": str(aggregate.total_revenues),
                        "net_profit": str(reconciliation.net_profit),
                        "profit_share": str(reconciliation.profit_share),
                        "transaction_count": aggregate.transaction_count,
                        "successor_period_id": str(successor.period_id),
                    },
                    occurred_at_utc=closed_at_utc,
                ),
                domain_build_audit_event(
                    category=AuditEventCategory.PERIOD_OPENED,
                    message="Successor period opened, awaiting name",
                    project_id=successor.project_id,
                    period_id=successor.period_id,
                    actor_id=actor.actor_id,
                    metadata={
                        "status": successor.status.value,
                        "starting_balances": domain_serialize_balances(successor.starting_balances),
                        "predecessor_period_id": str(closed_period.period_id),
                    },
                    occurred_at_utc=closed_at_utc,
                ),
            )
            ledger_append_audit_events(session, events)

        return PeriodTransitionResult(period=closed_period, successor=successor, events=events)

    def ledger_period_name(self, period_id: UUID, name: str, actor: ActorContext) -> PeriodTransitionResult:
        """Name one pending period and make it active.

        Args:
            period_id: Period identifier.
            name: Requested name; surrounding whitespace is trimmed.
            actor: Caller context recorded in audit events.

        Returns:
            PeriodTransitionResult: Activated period and one `PERIOD_OPENED` event.

        Raises:
            LedgerValidationError: Raised when name is blank.
            PeriodNotFoundError: Raised when the period does not exist.
            PeriodStateError: Raised when the period is not `PENDING_NAME`.
        """

        normalized_name = (name or "").strip()
        if not normalized_name:
            raise LedgerValidationError("name must not be blank", field="name")

        with self._unit_of_work.db_unit_of_work() as session:
            period = self._ledger_lock_period(session=session, period_id=period_id)
            ledger_require_period_status(period, PeriodStatus.PENDING_NAME, "name")

            opened_at_utc = self._clock()
            named_period = session.db_period_update_status_and_balances(
                period_id=period_id,
                expected_status=PeriodStatus.PENDING_NAME,
                update=PeriodStatusUpdate(
                    status=PeriodStatus.ACTIVE,
                    name=normalized_name,
                    opened_at_utc=opened_at_utc,
                ),
            )
            if named_period is None:
                raise PeriodStateError(
                    f"period {period_id} is no longer awaiting a name",
                    expected_status=PeriodStatus.PENDING_NAME.value,
                )

            event = domain_build_audit_event(
                category=AuditEventCategory.PERIOD_OPENED,
                message=f"Period opened: {named_period.name}",
                project_id=named_period.project_id,
                period_id=named_period.period_id,
                actor_id=actor.actor_id,
                metadata={"starting_balances": domain_serialize_balances(named_period.starting_balances)},
                occurred_at_utc=opened_at_utc,
            )
            ledger_append_audit_events(session, (event,))

        return PeriodTransitionResult(period=named_period, successor=None, events=(event,))

    def ledger_period_bootstrap(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Create the first active period of a project that has none.

        Args:
            project_id: Project identifier.
            actor: Caller context recorded in audit events.

        Returns:
            PeriodTransitionResult: New period with one `PERIOD_OPENED` event, or
            `created=False` with the project's current period when periods exist.

        Raises:
            ProjectNotFoundError: Raised when the project does not exist.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            self._ledger_lock_project(session=session, project_id=project_id)
            existing_periods = session.db_period_list_for_project(project_id)
            if existing_periods:
                current_period = next(
                    (period for period in existing_periods if period.status in OPEN_PERIOD_STATUSES),
                    existing_periods[0],
                )
                return PeriodTransitionResult(period=current_period, successor=None, events=(), created=False)

            opened_at_utc = self._clock()
            period = session.db_period_create(
                PeriodCreateRequest(
                    project_id=project_id,
                    name=self._config.opening_period_name,
                    start_date=opened_at_utc.date(),
                    status=PeriodStatus.ACTIVE,
                    starting_balances=domain_zero_balances(),
                )
            )

            event = domain_build_audit_event(
                category=AuditEventCategory.PERIOD_OPENED,
                message=f"Opening period created: {period.name}",
                project_id=project_id,
                period_id=period.period_id,
                actor_id=actor.actor_id,
                metadata={"starting_balances": domain_serialize_balances(period.starting_balances)},
                occurred_at_utc=opened_at_utc,
            )
            ledger_append_audit_events(session, (event,))

        return PeriodTransitionResult(period=period, successor=None, events=(event,))

    def ledger_period_hard_reset(self, project_id: UUID, actor: ActorContext) -> PeriodTransitionResult:
        """Force-close open periods without reconciliation and start from zero balances.

        Args:
            project_id: Project identifier.
            actor: Caller context; must hold the ADMIN role.

        Returns:
            PeriodTransitionResult: Fresh active period, force-closed periods and
            events (one `PERIOD_CLOSED` per forced close, then `PERIOD_OPENED`).

        Raises:
            AccessDeniedError: Raised when actor is not ADMIN.
            ProjectNotFoundError: Raised when the project does not exist.
        """

        if not actor.actor_is_admin():
            raise AccessDeniedError("hard reset requires the ADMIN role", operation="period_hard_reset")

        events = []
        with self._unit_of_work.db_unit_of_work() as session:
            self._ledger_lock_project(session=session, project_id=project_id)
            reset_at_utc = self._clock()

            closed_periods: list[PeriodRecord] = []
            for period in session.db_period_list_for_project(project_id):
                if period.status not in OPEN_PERIOD_STATUSES:
                    continue
                closed_period = session.db_period_update_status_and_balances(
                    period_id=period.period_id,
                    expected_status=period.status,
                    update=PeriodStatusUpdate(
                        status=PeriodStatus.CLOSED,
                        end_date=reset_at_utc.date(),
                        closed_at_utc=reset_at_utc,
                    ),
                )
                if closed_period is None:
                    raise PeriodStateError(
                        f"period {period.period_id} changed status during reset",
                        expected_status=period.status.value,
                    )
                closed_periods.append(closed_period)
                events.append(
                    domain_build_audit_event(
                        category=AuditEventCategory.PERIOD_CLOSED,
                        message=f"Period force-closed by reset: {closed_period.name or closed_period.period_id}",
                        project_id=project_id,
                        period_id=closed_period.period_id,
                        actor_id=actor.actor_id,
                        metadata={"forced": True, "previous_status": period.status.value},
                        occurred_at_utc=reset_at_utc,
                    )
                )

            fresh_period = session.db_period_create(
                PeriodCreateRequest(
                    project_id=project_id,
                    name=self._config.opening_period_name,
                    start_date=reset_at_utc.date(),
                    status=PeriodStatus.ACTIVE,
                    starting_balances=domain_zero_balances(),
                )
            )
            events.append(
                domain_build_audit_event(
                    category=AuditEventCategory.PERIOD_OPENED,
                    message=f"Opening period created by reset: {fresh_period.name}",
                    project_id=project_id,
                    period_id=fresh_period.period_id,
                    actor_id=actor.actor_id,
                    metadata={
                        "reset": True,
                        "starting_balances": domain_serialize_balances(fresh_period.starting_balances),
                    },
                    occurred_at_utc=reset_at_utc,
                )
            )
            ledger_append_audit_events(session, events)

        return PeriodTransitionResult(
            period=fresh_period,
            successor=None,
            events=tuple(events),
            closed_periods=tuple(closed_periods),
        )

    def ledger_period_preview(self, period_id: UUID) -> PeriodBalancePreview:
        """Aggregate and reconcile one period without writing anything.

        Args:
            period_id: Period identifier.

        Returns:
            PeriodBalancePreview: Current aggregate and reconciliation verdict.

        Raises:
            PeriodNotFoundError: Raised when the period does not exist.
            TransactionIntegrityError: Raised when stored transactions cannot be aggregated.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            period = session.db_period_get(period_id)
            if period is None:
                raise PeriodNotFoundError(f"period {period_id} not found")
            aggregate = ledger_aggregate_period_transactions(session.db_transaction_list_by_period(period_id))

        reconciliation = ledger_reconcile_balances(
            aggregate=aggregate,
            starting_balances=period.starting_balances,
            tolerance=self._config.reconciliation_tolerance,
        )
        return PeriodBalancePreview(period=period, aggregate=aggregate, reconciliation=reconciliation)

    def ledger_period_get(self, period_id: UUID) -> PeriodRecord:
        """Fetch one period.

        Args:
            period_id: Period identifier.

        Returns:
            PeriodRecord: Matching period.

        Raises:
            PeriodNotFoundError: Raised when the period does not exist.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            period = session.db_period_get(period_id)
        if period is None:
            raise PeriodNotFoundError(f"period {period_id} not found")
        return period

    def ledger_period_list_for_project(self, project_id: UUID) -> list[PeriodRecord]:
        """List periods of one project newest first.

        Args:
            project_id: Project identifier.

        Returns:
            list[PeriodRecord]: Ordered periods.

        Raises:
            ProjectNotFoundError: Raised when the project does not exist.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            if session.db_project_get(project_id) is None:
                raise ProjectNotFoundError(f"project {project_id} not found")
            return session.db_period_list_for_project(project_id)

    def _ledger_lock_period(self, session: LedgerSessionPort, period_id: UUID) -> PeriodRecord:
        """Take the project lock and the period row lock, returning the locked period.

        Args:
            session: Open ledger session.
            period_id: Period identifier.

        Returns:
            PeriodRecord: Period state read under `FOR UPDATE`.

        Raises:
            PeriodNotFoundError: Raised when the period does not exist.
        """

        period = session.db_period_get(period_id)
        if period is None:
            raise PeriodNotFoundError(f"period {period_id} not found")
        session.db_project_lock(period.project_id)
        locked_period = session.db_period_get(period_id, lock_mode=PERIOD_LOCK_UPDATE)
        if locked_period is None:
            raise PeriodNotFoundError(f"period {period_id} not found")
        return locked_period

    def _ledger_lock_project(self, session: LedgerSessionPort, project_id: UUID) -> None:
        """Verify the project exists and take its transition lock.

        Args:
            session: Open ledger session.
            project_id: Project identifier.

        Returns:
            None: Lock is held as side effect.

        Raises:
            ProjectNotFoundError: Raised when the project does not exist.
        """

        if session.db_project_get(project_id) is None:
            raise ProjectNotFoundError(f"project {project_id} not found")
        session.db_project_lock(project_id)


def ledger_require_period_status(period: PeriodRecord, expected_status: PeriodStatus, action: str) -> None:
    """Reject an operation when the period is not in the expected status.

    Args:
        period: Period under operation.
        expected_status: Required status.
        action: Operation label used in the error message.

    Returns:
        None: Returns only when the status matches.

    Raises:
        PeriodStateError: Raised when statuses differ.
    """

    if period.status != expected_status:
        raise PeriodStateError(
            f"cannot {action} period {period.period_id}: status is {period.status.value}, "
            f"expected {expected_status.value}",
            expected_status=expected_status.value,
            actual_status=period.status.value,
        )



def ledger_append_audit_events(session: LedgerSessionPort, events: Iterable[AuditEvent]) -> None:
    """Append events in order inside the open unit of work.

    Args:
        session: Open ledger session.
        events: Events produced by the current transition.

    Returns:
        None: Rows are written as side effect.

    Raises:
        RuntimeError: Raised when the insert fails; the unit of work rolls back.
    """

    for event in events:
        session.db_audit_append(event)


__all__ = [
    "OPEN_PERIOD_STATUSES",
    "PeriodTransitionConfig",
    "PeriodTransitionManager",
    "ledger_append_audit_events",
    "ledger_require_period_status",
]
