"""Regression tests for ledger store SQL templates and row mapping."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from app.db import PeriodStatusUpdate, TransactionWriteRequest, db_build_project_lock_keys
from app.db.ledger_store import SQLAlchemyLedgerSession, db_map_period_record
from app.domain import (
    AuditEventCategory,
    Partner,
    PeriodStatus,
    TransactionNotFoundError,
    TransactionType,
    domain_build_audit_event,
)


class _MappingResultStub:
    """Stub mapping result wrapper for SQLAlchemy-like query responses."""

    def __init__(self, rows: list[dict]):
        self._rows = rows

    def mappings(self) -> _MappingResultStub:
        """Return self to emulate SQLAlchemy mappings chain."""

        return self

    def first(self) -> dict | None:
        """Return the first row or None."""

        return self._rows[0] if self._rows else None

    def one(self) -> dict:
        """Return exactly one row."""

        assert len(self._rows) == 1
        return self._rows[0]

    def all(self) -> list[dict]:
        """Return all rows."""

        return self._rows


class _ConnectionStub:
    """Connection stub capturing executed SQL and replaying queued rows."""

    def __init__(self, queued_rows: list[list[dict]]):
        """Initialize connection capture state.

        Args:
            queued_rows: Rows returned by successive execute() calls.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: This stub does not raise value errors.
        """

        self._queued_rows = list(queued_rows)
        self.executed_queries: list[str] = []
        self.executed_parameters: list[dict] = []

    def execute(self, statement, parameters: dict) -> _MappingResultStub:
        """Capture one statement and return the next queued rows."""

        self.executed_queries.append(str(statement))
        self.executed_parameters.append(parameters)
        rows = self._queued_rows.pop(0) if self._queued_rows else []
        return _MappingResultStub(rows)


def _period_row(**overrides) -> dict:
    timestamp = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
    row = {
        "period_id": uuid4(),
        "project_id": uuid4(),
        "name": "Q3",
        "start_date": date(2026, 7, 1),
        "end_date": None,
        "status": "ACTIVE",
        "p1_balance_start": Decimal("10.00"),
        "p2_balance_start": Decimal("-10.00"),
        "p1_balance_end": None,
        "p2_balance_end": None,
        "opened_at_utc": timestamp,
        "closed_at_utc": None,
        "created_at_utc": timestamp,
    }
    row.update(overrides)
    return row


@pytest.mark.parametrize(
    ("lock_mode", "expected_suffix"),
    [("none", "WHERE period_id = :period_id"), ("share", "FOR SHARE"), ("update", "FOR UPDATE")],
)
def test_db_period_get_appends_lock_clause(lock_mode, expected_suffix) -> None:
    """Select periods with the requested row lock clause.

    Returns:
        None: Assertions validate executed SQL.

    Raises:
        AssertionError: Raised when lock clauses are missing.
    """

    connection = _ConnectionStub([[_period_row()]])
    session = SQLAlchemyLedgerSession(connection=connection)

    period = session.db_period_get(uuid4(), lock_mode=lock_mode)

    assert period is not None
    assert connection.executed_queries[0].endswith(expected_suffix)


def test_db_period_get_rejects_unknown_lock_mode() -> None:
    """Reject unsupported lock modes before executing SQL.

    Returns:
        None: Assertions validate the raised error.

    Raises:
        AssertionError: Raised when an unknown lock mode reaches the database.
    """

    connection = _ConnectionStub([])

    with pytest.raises(ValueError):
        SQLAlchemyLedgerSession(connection=connection).db_period_get(uuid4(), lock_mode="exclusive")

    assert connection.executed_queries == []


def test_db_period_update_is_compare_and_swap_on_status() -> None:
    """Guard period updates by the expected status and report lost races as None.

    Returns:
        None: Assertions validate SQL guard and parameters.

    Raises:
        AssertionError: Raised when the update is not status-guarded.
    """

    connection = _ConnectionStub([[]])
    session = SQLAlchemyLedgerSession(connection=connection)

    result = session.db_period_update_status_and_balances(
        period_id=uuid4(),
        expected_status=PeriodStatus.ACTIVE,
        update=PeriodStatusUpdate(
            status=PeriodStatus.CLOSED,
            end_date=date(2026, 10, 19),
            ending_balances={Partner.P1: Decimal("3600.00"), Partner.P2: Decimal("-3600.00")},
        ),
    )

    assert result is None
    assert "AND status = :expected_status" in connection.executed_queries[0]
    parameters = connection.executed_parameters[0]
    assert parameters["expected_status"] == "ACTIVE"
    assert parameters["status"] == "CLOSED"
    assert parameters["p1_balance_end"] == Decimal("3600.00")
    assert parameters["p2_balance_end"] == Decimal("-3600.00")
    assert parameters["name"] is None


def test_db_project_lock_uses_deterministic_advisory_keys() -> None:
    """Lock projects with stable signed int32 advisory keys.

    Returns:
        None: Assertions validate key derivation and SQL.

    Raises:
        AssertionError: Raised when keys are unstable or out of range.
    """

    project_id = uuid4()
    connection = _ConnectionStub([])

    SQLAlchemyLedgerSession(connection=connection).db_project_lock(project_id)

    key_1, key_2 = db_build_project_lock_keys(project_id)
    assert (key_1, key_2) == db_build_project_lock_keys(project_id)
    assert db_build_project_lock_keys(uuid4()) != (key_1, key_2)
    assert all(-(2**31) <= key <= 2**31 - 1 for key in (key_1, key_2))
    assert "pg_advisory_xact_lock" in connection.executed_queries[0]
    assert connection.executed_parameters[0] == {"key_1": key_1, "key_2": key_2}


def test_db_map_period_record_maps_balance_columns() -> None:
    """Map balance column pairs to partner dictionaries.

    Returns:
        None: Assertions validate mapped balances.

    Raises:
        AssertionError: Raised when mapping deviates.
    """

    open_period = db_map_period_record(_period_row())
    closed_period = db_map_period_record(
        _period_row(status="CLOSED", p1_balance_end=Decimal("1.50"), p2_balance_end=Decimal("-1.50"))
    )

    assert open_period.status == PeriodStatus.ACTIVE
    assert open_period.starting_balances == {Partner.P1: Decimal("10.00"), Partner.P2: Decimal("-10.00")}
    assert open_period.ending_balances is None
    assert closed_period.ending_balances == {Partner.P1: Decimal("1.50"), Partner.P2: Decimal("-1.50")}


def test_db_transaction_update_raises_not_found_for_missing_row() -> None:
    """Raise the ledger not-found error when the update returns no row.

    Returns:
        None: Assertions validate raised error type.

    Raises:
        AssertionError: Raised when a missing row is reported as a bare lookup failure.
    """

    connection = _ConnectionStub(queued_rows=[[]])
    session = SQLAlchemyLedgerSession(connection=connection)
    request = TransactionWriteRequest(
        transaction_type=TransactionType.EXPENSE,
        transaction_date=date(2026, 8, 1),
        description="Tiles",
        amount=Decimal("12.50"),
        paid_by=Partner.P1,
        from_partner=None,
        to_partner=None,
    )

    with pytest.raises(TransactionNotFoundError) as error_info:
        session.db_transaction_update(transaction_id=uuid4(), request=request)

    assert error_info.value.error_code == TransactionNotFoundError.error_code
    assert connection.executed_queries[0].startswith("UPDATE ledger_transaction SET")


def test_db_audit_append_inserts_on_session_connection() -> None:
    """Insert the event through the unit-of-work connection with its own timestamp.

    Returns:
        None: Assertions validate SQL parameters and mapped record.

    Raises:
        AssertionError: Raised when the event bypasses the session connection.
    """

    occurred_at_utc = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
    event = domain_build_audit_event(
        category=AuditEventCategory.PERIOD_CLOSED,
        message="Period closed: Q3",
        metadata={"net_profit": "3800.00"},
        occurred_at_utc=occurred_at_utc,
    )
    event_log_id = uuid4()
    connection = _ConnectionStub(
        queued_rows=[
            [
                {
                    "event_log_id": event_log_id,
                    "category": "PERIOD_CLOSED",
                    "message": "Period closed: Q3",
                    "project_id": None,
                    "period_id": None,
                    "transaction_id": None,
                    "actor_id": None,
                    "metadata": {"net_profit": "3800.00"},
                    "occurred_at_utc": occurred_at_utc,
                }
            ]
        ]
    )

    record = SQLAlchemyLedgerSession(connection=connection).db_audit_append(event)

    assert connection.executed_queries[0].startswith("INSERT INTO event_log")
    assert connection.executed_parameters[0]["occurred_at_utc"] == occurred_at_utc
    assert connection.executed_parameters[0]["metadata"] == '{"net_profit": "3800.00"}'
    assert record.event_log_id == event_log_id
    assert record.event == event
