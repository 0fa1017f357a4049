"""Database unit of work for atomic period and transaction persistence."""
# pylint: disable=duplicate-code

from __future__ import annotations

import hashlib
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import Connection, Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import (
    AuditEvent,
    AuditEventRecord,
    Partner,
    PeriodNotFoundError,
    PeriodRecord,
    PeriodStatus,
    ProjectRecord,
    TransactionNotFoundError,
    TransactionRecord,
    TransactionType,
)

from .audit_log import db_insert_event_log
from .interfaces import (
    PERIOD_LOCK_NONE,
    PERIOD_LOCK_SHARE,
    PERIOD_LOCK_UPDATE,
    LedgerSessionPort,
    LedgerUnitOfWorkPort,
    PeriodCreateRequest,
    PeriodStatusUpdate,
    TransactionWriteRequest,
)

_PERIOD_SELECT_COLUMNS = (
    "SELECT "
    "period_id, project_id, name, start_date, end_date, status, "
    "p1_balance_start, p2_balance_start, p1_balance_end, p2_balance_end, "
    "opened_at_utc, closed_at_utc, created_at_utc "
    "FROM period "
)

_PERIOD_LOCK_CLAUSES = {
    PERIOD_LOCK_NONE: "",
    PERIOD_LOCK_SHARE: " FOR SHARE",
    PERIOD_LOCK_UPDATE: " FOR UPDATE",
}

_TRANSACTION_COLUMNS = (
    "transaction_id, project_id, period_id, transaction_type, transaction_date, description, amount, "
    "paid_by, from_partner, to_partner, created_by, created_at_utc, updated_at_utc"
)


class SQLAlchemyLedgerUnitOfWork(LedgerUnitOfWorkPort):
    """SQLAlchemy-backed unit of work.

    Each unit of work is one `engine.begin()` transaction: committed when the
    block exits cleanly, rolled back when anything inside raises.
    """

    def __init__(self, engine: Engine):
        """Initialize unit-of-work factory.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    @contextmanager
    def db_unit_of_work(self) -> Iterator[LedgerSessionPort]:
        """Open one database transaction bound to a ledger session.

        Returns:
            Iterator[LedgerSessionPort]: Session valid until the block exits.

        Raises:
            RuntimeError: Raised when the database transaction fails.
        """

        try:
            with self._engine.begin() as connection:
                yield SQLAlchemyLedgerSession(connection=connection)
        except SQLAlchemyError as error:
            raise RuntimeError("ledger unit of work failed") from error


class SQLAlchemyLedgerSession(LedgerSessionPort):
    """Period and transaction store operations on one open connection."""

    def __init__(self, connection: Connection):
        """Initialize session.

        Args:
            connection: Connection with an open transaction.

        Raises:
            ValueError: Raised when connection is None.
        """

        if connection is None:
            raise ValueError("connection must not be None")
        self._connection = connection

    def db_project_lock(self, project_id: UUID) -> None:
        """Take a transaction-scoped advisory lock for one project.

        Args:
            project_id: Project identifier.

        Returns:
            None: Lock is released at commit or rollback.

        Raises:
            SQLAlchemyError: Raised when the lock statement fails.
        """

        key_1, key_2 = db_build_project_lock_keys(project_id)
        self._connection.execute(
            text("SELECT pg_advisory_xact_lock(:key_1, :key_2)"),
            {"key_1": key_1, "key_2": key_2},
        )

    def db_project_get(self, project_id: UUID) -> ProjectRecord | None:
        """Fetch one project by id.

        Args:
            project_id: Project identifier.

        Returns:
            ProjectRecord | None: Matching project or None.

        Raises:
            SQLAlchemyError: Raised when the read fails.
        """

        row = self._connection.execute(
            text(
                "SELECT project_id, name, description, created_at_utc "
                "FROM project WHERE project_id = :project_id"
            ),
            {"project_id": project_id},
        ).mappings().first()
        if row is None:
            return None
        return db_map_project_record(row)

    def db_period_get(self, period_id: UUID, lock_mode: str = PERIOD_LOCK_NONE) -> PeriodRecord | None:
        """Fetch one period with an optional row lock.

        Args:
            period_id: Period identifier.
            lock_mode: `none`, `share` or `update`.

        Returns:
            PeriodRecord | None: Matching period or None.

        Raises:
            ValueError: Raised when lock_mode is unsupported.
        """

        if lock_mode not in _PERIOD_LOCK_CLAUSES:
            raise ValueError(f"unsupported lock_mode={lock_mode}")

        row = self._connection.execute(
            text(_PERIOD_SELECT_COLUMNS + "WHERE period_id = :period_id" + _PERIOD_LOCK_CLAUSES[lock_mode]),
            {"period_id": period_id},
        ).mappings().first()
        if row is None:
            return None
        return db_map_period_record(row)

    def db_period_list_for_project(self, project_id: UUID) -> list[PeriodRecord]:
        """List periods of one project newest first.

        Args:
            project_id: Project identifier.

        Returns:
            list[PeriodRecord]: Ordered periods.

        Raises:
            SQLAlchemyError: Raised when the read fails.
        """

        rows = self._connection.execute(
            text(
                _PERIOD_SELECT_COLUMNS
                + "WHERE project_id = :project_id "
                + "ORDER BY created_at_utc DESC, start_date DESC, period_id DESC"
            ),
            {"project_id": project_id},
        ).mappings().all()
        return [db_map_period_record(row) for row in rows]

    def db_period_create(self, request: PeriodCreateRequest) -> PeriodRecord:
        """Insert one period row.

        Args:
            request: Period field values.

        Returns:
            PeriodRecord: Inserted period.

        Raises:
            SQLAlchemyError: Raised when the insert fails.
        """

        created_row = self._connection.execute(
            text(
                "INSERT INTO period ("
                "project_id, name, start_date, status, p1_balance_start, p2_balance_start, opened_at_utc"
                ") VALUES ("
                ":project_id, :name, :start_date, :status, :p1_balance_start, :p2_balance_start, now()"
                ") "
                "RETURNING period_id"
            ),
            {
                "project_id": request.project_id,
                "name": request.name,
                "start_date": request.start_date,
                "status": request.status.value,
                **_db_balance_parameters(request.starting_balances, "start"),
            },
        ).mappings().one()
        return self._db_fetch_period_or_raise(created_row["period_id"])

    def db_period_update_status_and_balances(
        self,
        period_id: UUID,
        expected_status: PeriodStatus,
        update: PeriodStatusUpdate,
    ) -> PeriodRecord | None:
        """Compare-and-swap one period's status and write transition fields.

        Args:
            period_id: Period identifier.
            expected_status: Status the row must still hold.
            update: Field values to write; None values keep stored values.

        Returns:
            PeriodRecord | None: Updated period or None when status no longer matched.

        Raises:
            SQLAlchemyError: Raised when the update fails.
        """

        updated_row = self._connection.execute(
            text(
                "UPDATE period SET "
                "status = :status, "
                "name = COALESCE(CAST(:name AS text), name), "
                "end_date = COALESCE(CAST(:end_date AS date), end_date), "
                "p1_balance_end = COALESCE(CAST(:p1_balance_end AS numeric), p1_balance_end), "
                "p2_balance_end = COALESCE(CAST(:p2_balance_end AS numeric), p2_balance_end), "
                "opened_at_utc = COALESCE(CAST(:opened_at_utc AS timestamptz), opened_at_utc), "
                "closed_at_utc = COALESCE(CAST(:closed_at_utc AS timestamptz), closed_at_utc), "
                "updated_at_utc = now() "
                "WHERE period_id = :period_id AND status = :expected_status "
                "RETURNING period_id"
            ),
            {
                "status": update.status.value,
                "name": update.name,
                "end_date": update.end_date,
                "opened_at_utc": update.opened_at_utc,
                "closed_at_utc": update.closed_at_utc,
                "period_id": period_id,
                "expected_status": expected_status.value,
                **_db_balance_parameters(update.ending_balances, "end"),
            },
        ).mappings().first()
        if updated_row is None:
            return None
        return self._db_fetch_period_or_raise(period_id)

    def db_transaction_list_by_period(self, period_id: UUID) -> list[TransactionRecord]:
        """List every transaction of one period.

        Args:
            period_id: Period identifier.

        Returns:
            list[TransactionRecord]: Transactions ordered by date descending.

        Raises:
            SQLAlchemyError: Raised when the read fails.
        """

        rows = self._connection.execute(
            text(
                f"SELECT {_TRANSACTION_COLUMNS} FROM ledger_transaction "
                "WHERE period_id = :period_id "
                "ORDER BY transaction_date DESC, created_at_utc DESC, transaction_id DESC"
            ),
            {"period_id": period_id},
        ).mappings().all()
        return [db_map_transaction_record(row) for row in rows]

    def db_transaction_list_by_project(self, project_id: UUID) -> list[TransactionRecord]:
        """List every transaction of one project across its periods.

        Args:
            project_id: Project identifier.

        Returns:
            list[TransactionRecord]: Transactions ordered by date descending.

        Raises:
            SQLAlchemyError: Raised when the read fails.
        """

        rows = self._connection.execute(
            text(
                f"SELECT {_TRANSACTION_COLUMNS} FROM ledger_transaction "
                "WHERE project_id = :project_id "
                "ORDER BY transaction_date DESC, created_at_utc DESC, transaction_id DESC"
            ),
            {"project_id": project_id},
        ).mappings().all()
        return [db_map_transaction_record(row) for row in rows]

    def db_transaction_get(self, transaction_id: UUID) -> TransactionRecord | None:
        """Fetch one transaction.

        Args:
            transaction_id: Transaction identifier.

        Returns:
            TransactionRecord | None: Matching transaction or None.

        Raises:
            SQLAlchemyError: Raised when the read fails.
        """

        row = self._connection.execute(
            text(f"SELECT {_TRANSACTION_COLUMNS} FROM ledger_transaction WHERE transaction_id = :transaction_id"),
            {"transaction_id": transaction_id},
        ).mappings().first()
        if row is None:
            return None
        return db_map_transaction_record(row)

    def db_transaction_insert(
        self,
        project_id: UUID,
        period_id: UUID,
        request: TransactionWriteRequest,
        created_by: str | None,
    ) -> TransactionRecord:
        """Insert one transaction row.

        Args:
            project_id: Owning project identifier.
            period_id: Owning period identifier.
            request: Validated field values.
            created_by: Optional actor identifier.

        Returns:
            TransactionRecord: Inserted transaction.

        Raises:
            SQLAlchemyError: Raised when the insert fails.
        """

        row = self._connection.execute(
            text(
                "INSERT INTO ledger_transaction ("
                "project_id, period_id, transaction_type, transaction_date, description, amount, "
                "paid_by, from_partner, to_partner, created_by"
                ") VALUES ("
                ":project_id, :period_id, :transaction_type, :transaction_date, :description, :amount, "
                ":paid_by, :from_partner, :to_partner, :created_by"
                ") "
                f"RETURNING {_TRANSACTION_COLUMNS}"
            ),
            {
                "project_id": project_id,
                "period_id": period_id,
                "created_by": created_by,
                **_db_transaction_parameters(request),
            },
        ).mappings().one()
        return db_map_transaction_record(row)

    def db_transaction_update(self, transaction_id: UUID, request: TransactionWriteRequest) -> TransactionRecord:
        """Replace the editable fields of one transaction.

        Args:
            transaction_id: Transaction identifier.
            request: Validated field values.

        Returns:
            TransactionRecord: Updated transaction.

        Raises:
            TransactionNotFoundError: Raised when the transaction does not exist.
        """

        row = self._connection.execute(
            text(
                "UPDATE ledger_transaction SET "
                "transaction_type = :transaction_type, "
                "transaction_date = :transaction_date, "
                "description = :description, "
                "amount = :amount, "
                "paid_by = :paid_by, "
                "from_partner = :from_partner, "
                "to_partner = :to_partner, "
                "updated_at_utc = now() "
                "WHERE transaction_id = :transaction_id "
                f"RETURNING {_TRANSACTION_COLUMNS}"
            ),
            {"transaction_id": transaction_id, **_db_transaction_parameters(request)},
        ).mappings().first()
        if row is None:
            raise TransactionNotFoundError(f"transaction {transaction_id} not found")
        return db_map_transaction_record(row)

    def db_transaction_delete(self, transaction_id: UUID) -> bool:
        """Delete one transaction.

        Args:
            transaction_id: Transaction identifier.

        Returns:
            bool: Whether a row was deleted.

        Raises:
            SQLAlchemyError: Raised when the delete fails.
        """

        deleted_row = self._connection.execute(
            text("DELETE FROM ledger_transaction WHERE transaction_id = :transaction_id RETURNING transaction_id"),
            {"transaction_id": transaction_id},
        ).first()
        return deleted_row is not None

    def db_audit_append(self, event: AuditEvent) -> AuditEventRecord:
        """Append one audit event on the session connection.

        Args:
            event: Event payload.

        Returns:
            AuditEventRecord: Persisted event row.

        Raises:
            SQLAlchemyError: Raised when the insert fails.
        """

        return db_insert_event_log(self._connection, event)

    def _db_fetch_period_or_raise(self, period_id: UUID) -> PeriodRecord:
        """Fetch one period inside the active transaction and raise when missing."""

        period = self.db_period_get(period_id)
        if period is None:
            raise PeriodNotFoundError(f"period {period_id} not found")
        return period


def db_build_project_lock_keys(project_id: UUID) -> tuple[int, int]:
    """Create deterministic advisory lock keys for one project.

    Args:
        project_id: Project identifier.

    Returns:
        tuple[int, int]: Two signed int32 keys for PostgreSQL advisory locks.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    digest = hashlib.sha256(f"period-ledger:{project_id}".encode("utf-8")).digest()
    key_1 = int.from_bytes(digest[0:4], byteorder="big", signed=True)
    key_2 = int.from_bytes(digest[4:8], byteorder="big", signed=True)
    return key_1, key_2


def db_map_project_record(row: Any) -> ProjectRecord:
    """Map SQLAlchemy row mapping to typed project record."""

    return ProjectRecord(
        project_id=row["project_id"],
        name=row["name"],
        description=row["description"],
        created_at_utc=row["created_at_utc"],
    )


def db_map_period_record(row: Any) -> PeriodRecord:
    """Map SQLAlchemy row mapping to typed period record.

    Args:
        row: SQLAlchemy mapping row.

    Returns:
        PeriodRecord: Typed period record.

    Raises:
        ValueError: Raised when stored status is unknown.
    """

    starting_balances = {
        partner: Decimal(row[f"{partner.value.lower()}_balance_start"]) for partner in Partner
    }
    ending_values = {partner: row[f"{partner.value.lower()}_balance_end"] for partner in Partner}
    ending_balances = None
    if all(value is not None for value in ending_values.values()):
        ending_balances = {partner: Decimal(value) for partner, value in ending_values.items()}

    return PeriodRecord(
        period_id=row["period_id"],
        project_id=row["project_id"],
        name=row["name"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        status=PeriodStatus(row["status"]),
        starting_balances=starting_balances,
        ending_balances=ending_balances,
        opened_at_utc=row["opened_at_utc"],
        closed_at_utc=row["closed_at_utc"],
        created_at_utc=row["created_at_utc"],
    )


def db_map_transaction_record(row: Any) -> TransactionRecord:
    """Map SQLAlchemy row mapping to typed transaction record.

    Args:
        row: SQLAlchemy mapping row.

    Returns:
        TransactionRecord: Typed transaction record.

    Raises:
        ValueError: Raised when stored type or partner codes are unknown.
    """

    return TransactionRecord(
        transaction_id=row["transaction_id"],
        project_id=row["project_id"],
        period_id=row["period_id"],
        transaction_type=TransactionType(row["transaction_type"]),
        transaction_date=row["transaction_date"],
        description=row["description"],
        amount=Decimal(row["amount"]),
        paid_by=_db_optional_partner(row["paid_by"]),
        from_partner=_db_optional_partner(row["from_partner"]),
        to_partner=_db_optional_partner(row["to_partner"]),
        created_by=row["created_by"],
        created_at_utc=row["created_at_utc"],
        updated_at_utc=row["updated_at_utc"],
    )


def _db_optional_partner(value: str | None) -> Partner | None:
    if value is None:
        return None
    return Partner(value)


def _db_balance_parameters(balances: Mapping[Partner, Decimal] | None, suffix: str) -> dict[str, Decimal | None]:
    return {
        f"{partner.value.lower()}_balance_{suffix}": (balances[partner] if balances is not None else None)
        for partner in Partner
    }


def _db_transaction_parameters(request: TransactionWriteRequest) -> dict[str, object]:
    return {
        "transaction_type": request.transaction_type.value,
        "transaction_date": request.transaction_date,
        "description": request.description,
        "amount": request.amount,
        "paid_by": request.paid_by.value if request.paid_by else None,
        "from_partner": request.from_partner.value if request.from_partner else None,
        "to_partner": request.to_partner.value if request.to_partner else None,
    }
