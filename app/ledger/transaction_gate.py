"""Status-gated transaction writes with input validation."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from uuid import UUID

from app.db import PERIOD_LOCK_SHARE, LedgerSessionPort, LedgerUnitOfWorkPort, TransactionWriteRequest
from app.domain import (
    ActorContext,
    AuditEventCategory,
    LedgerValidationError,
    Partner,
    PeriodNotFoundError,
    PeriodRecord,
    PeriodStatus,
    ProjectNotFoundError,
    TransactionNotFoundError,
    TransactionRecord,
    TransactionType,
    domain_build_audit_event,
)

from .interfaces import TransactionDraft, TransactionLedgerPort, TransactionMutationResult
from .period_transition import ledger_append_audit_events, ledger_require_period_status

AMOUNT_QUANTUM = Decimal("0.01")
AMOUNT_UPPER_BOUND = Decimal("1000000000000")


class TransactionLedgerService(TransactionLedgerPort):
    """Create, update and delete transactions only while their period is active.

    Each write reads the owning period under `FOR SHARE` inside the same unit
    of work, so a concurrent close (which holds `FOR UPDATE`) either finishes
    first and the write is rejected, or waits for the write to commit.
    """

    def __init__(self, unit_of_work: LedgerUnitOfWorkPort):
        """Initialize transaction service dependencies.

        Args:
            unit_of_work: DB-layer unit-of-work factory.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when unit_of_work is None.
        """

        if unit_of_work is None:
            raise ValueError("unit_of_work must not be None")
        self._unit_of_work = unit_of_work

    def ledger_transaction_create(
        self,
        period_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Validate and record one transaction in an active period.

        Args:
            period_id: Owning period identifier.
            draft: Unvalidated transaction input.
            actor: Caller context.

        Returns:
            TransactionMutationResult: Inserted row and one `TX_CREATED` event.

        Raises:
            LedgerValidationError: Raised when draft fields are invalid.
            PeriodNotFoundError: Raised when the period does not exist.
            PeriodStateError: Raised when the period is not `ACTIVE`.
        """

        write_request = ledger_validate_transaction_draft(draft)
        with self._unit_of_work.db_unit_of_work() as session:
            period = self._ledger_lock_active_period(session=session, period_id=period_id, action="record transactions in")
            transaction = session.db_transaction_insert(
                project_id=period.project_id,
                period_id=period.period_id,
                request=write_request,
                created_by=actor.actor_id,
            )
            event = domain_build_audit_event(
                category=AuditEventCategory.TX_CREATED,
                message=f"Transaction created: {transaction.description}",
                project_id=transaction.project_id,
                period_id=transaction.period_id,
                transaction_id=transaction.transaction_id,
                actor_id=actor.actor_id,
                metadata=_transaction_event_metadata(transaction),
                occurred_at_utc=transaction.created_at_utc,
            )
            ledger_append_audit_events(session, (event,))
        return TransactionMutationResult(transaction=transaction, events=(event,))

    def ledger_transaction_update(
        self,
        transaction_id: UUID,
        draft: TransactionDraft,
        actor: ActorContext,
    ) -> TransactionMutationResult:
        """Validate and replace one transaction of an active period.

        Args:
            transaction_id: Transaction identifier.
            draft: Unvalidated replacement values.
            actor: Caller context.

        Returns:
            TransactionMutationResult: Updated row and one `TX_UPDATED` event.

        Raises:
            LedgerValidationError: Raised when draft fields are invalid.
            TransactionNotFoundError: Raised when the transaction does not exist.
            PeriodStateError: Raised when the owning period is not `ACTIVE`.
        """

        write_request = ledger_validate_transaction_draft(draft)
        with self._unit_of_work.db_unit_of_work() as session:
            existing = self._ledger_require_transaction(session=session, transaction_id=transaction_id)
            self._ledger_lock_active_period(session=session, period_id=existing.period_id, action="update transactions in")
            transaction = session.db_transaction_update(transaction_id=transaction_id, request=write_request)
            event = domain_build_audit_event(
                category=AuditEventCategory.TX_UPDATED,
                message=f"Transaction updated: {transaction.description}",
                project_id=transaction.project_id,
                period_id=transaction.period_id,
                transaction_id=transaction.transaction_id,
                actor_id=actor.actor_id,
                metadata={
                    "before": _transaction_event_metadata(existing),
                    "after": _transaction_event_metadata(transaction),
                },
                occurred_at_utc=transaction.updated_at_utc,
            )
            ledger_append_audit_events(session, (event,))
        return TransactionMutationResult(transaction=transaction, events=(event,))

    def ledger_transaction_delete(self, transaction_id: UUID, actor: ActorContext) -> TransactionMutationResult:
        """Delete one transaction of an active period.

        Args:
            transaction_id: Transaction identifier.
            actor: Caller context.

        Returns:
            TransactionMutationResult: Removed row and one `TX_DELETED` event.

        Raises:
            TransactionNotFoundError: Raised when the transaction does not exist.
            PeriodStateError: Raised when the owning period is not `ACTIVE`.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            existing = self._ledger_require_transaction(session=session, transaction_id=transaction_id)
            self._ledger_lock_active_period(session=session, period_id=existing.period_id, action="delete transactions in")
            if not session.db_transaction_delete(transaction_id):
                raise TransactionNotFoundError(f"transaction {transaction_id} not found")
            event = domain_build_audit_event(
                category=AuditEventCategory.TX_DELETED,
                message=f"Transaction deleted: {existing.description}",
                project_id=existing.project_id,
                period_id=existing.period_id,
                transaction_id=existing.transaction_id,
                actor_id=actor.actor_id,
                metadata=_transaction_event_metadata(existing),
            )
            ledger_append_audit_events(session, (event,))
        return TransactionMutationResult(transaction=existing, events=(event,))

    def ledger_transaction_list_for_period(self, period_id: UUID) -> list[TransactionRecord]:
        """List transactions of one period.

        Args:
            period_id: Period identifier.

        Returns:
            list[TransactionRecord]: Transactions ordered by date descending.

        Raises:
            PeriodNotFoundError: Raised when the period does not exist.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            if session.db_period_get(period_id) is None:
                raise PeriodNotFoundError(f"period {period_id} not found")
            return session.db_transaction_list_by_period(period_id)

    def ledger_transaction_list_for_project(self, project_id: UUID) -> list[TransactionRecord]:
        """List transactions of every period of one project.

        Args:
            project_id: Project identifier.

        Returns:
            list[TransactionRecord]: Transactions ordered by date descending.

        Raises:
            ProjectNotFoundError: Raised when the project does not exist.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            if session.db_project_get(project_id) is None:
                raise ProjectNotFoundError(f"project {project_id} not found")
            return session.db_transaction_list_by_project(project_id)

    def ledger_transaction_get(self, transaction_id: UUID) -> TransactionRecord:
        """Fetch one transaction by id.

        Raises:
            TransactionNotFoundError: Raised when the transaction does not exist.
        """

        with self._unit_of_work.db_unit_of_work() as session:
            return self._ledger_require_transaction(session=session, transaction_id=transaction_id)

    def _ledger_lock_active_period(self, session: LedgerSessionPort, period_id: UUID, action: str) -> PeriodRecord:
        """Read the owning period under a shared lock and require `ACTIVE` status."""

        period = session.db_period_get(period_id, lock_mode=PERIOD_LOCK_SHARE)
        if period is None:
            raise PeriodNotFoundError(f"period {period_id} not found")
        ledger_require_period_status(period, PeriodStatus.ACTIVE, action)
        return period

    def _ledger_require_transaction(self, session: LedgerSessionPort, transaction_id: UUID) -> TransactionRecord:
        """Fetch one transaction or raise when absent."""

        transaction = session.db_transaction_get(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(f"transaction {transaction_id} not found")
        return transaction


def ledger_validate_transaction_draft(draft: TransactionDraft) -> TransactionWriteRequest:
    """Validate one transaction draft and normalize it to a write request.

    Args:
        draft: Unvalidated transaction input.

    Returns:
        TransactionWriteRequest: Typed, normalized field values.

    Raises:
        LedgerValidationError: Raised with the offending field name when input is invalid.
    """

    transaction_type = _validate_enum(TransactionType, draft.transaction_type, "transaction_type")
    description = (draft.description or "").strip()
    if not description:
        raise LedgerValidationError("description must not be blank", field="description")
    if draft.transaction_date is None:
        raise LedgerValidationError("transaction_date is required", field="transaction_date")

    amount = _validate_amount(draft.amount)
    paid_by = _validate_optional_partner(draft.paid_by, "paid_by")
    from_partner = _validate_optional_partner(draft.from_partner, "from_partner")
    to_partner = _validate_optional_partner(draft.to_partner, "to_partner")

    if transaction_type == TransactionType.SETTLEMENT:
        if from_partner is None:
            raise LedgerValidationError("from_partner is required for settlements", field="from_partner")
        if to_partner is None:
            raise LedgerValidationError("to_partner is required for settlements", field="to_partner")
        if from_partner == to_partner:
            raise LedgerValidationError("to_partner must differ from from_partner", field="to_partner")
        if paid_by is not None:
            raise LedgerValidationError("paid_by is not allowed for settlements", field="paid_by")
    else:
        if paid_by is None:
            raise LedgerValidationError(f"paid_by is required for {transaction_type.value.lower()}s", field="paid_by")
        if from_partner is not None or to_partner is not None:
            field_name = "from_partner" if from_partner is not None else "to_partner"
            raise LedgerValidationError(
                f"{field_name} is only allowed for settlements",
                field=field_name,
            )

    return TransactionWriteRequest(
        transaction_type=transaction_type,
        transaction_date=draft.transaction_date,
        description=description,
        amount=amount,
        paid_by=paid_by,
        from_partner=from_partner,
        to_partner=to_partner,
    )


def _validate_enum(enum_type, value, field_name: str):
    normalized_value = str(value or "").strip().upper()
    try:
        return enum_type(normalized_value)
    except ValueError as error:
        allowed_values = ", ".join(member.value for member in enum_type)
        raise LedgerValidationError(f"{field_name} must be one of: {allowed_values}", field=field_name) from error


def _validate_optional_partner(value: str | None, field_name: str) -> Partner | None:
    if value is None or not str(value).strip():
        return None
    return _validate_enum(Partner, value, field_name)


def _validate_amount(value: Decimal | str) -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as error:
        raise LedgerValidationError("amount must be a decimal number", field="amount") from error
    if not amount.is_finite():
        raise LedgerValidationError("amount must be a finite number", field="amount")
    if amount <= 0:
        raise LedgerValidationError("amount must be positive", field="amount")
    if amount >= AMOUNT_UPPER_BOUND:
        raise LedgerValidationError("amount exceeds the supported range", field="amount")
    if amount != amount.quantize(AMOUNT_QUANTUM):
        raise LedgerValidationError("amount must have at most two decimal places", field="amount")
    return amount.quantize(AMOUNT_QUANTUM)


def _transaction_event_metadata(transaction: TransactionRecord) -> dict[str, object]:
    return {
        "type": transaction.transaction_type.value,
        "date": transaction.transaction_date.isoformat(),
        "amount": str(transaction.amount),
        "paid_by": transaction.paid_by.value if transaction.paid_by else None,
        "from_partner": transaction.from_partner.value if transaction.from_partner else None,
        "to_partner": transaction.to_partner.value if transaction.to_partner else None,
    }


__all__ = ["TransactionLedgerService", "ledger_validate_transaction_draft"]
