"""Database service for the append-only audit event log."""

from __future__ import annotations

import json
from typing import Any
from uuid import UUID

from sqlalchemy import Connection, Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import AuditEvent, AuditEventCategory, AuditEventRecord

from .interfaces import AuditEventReadPort, AuditSinkPort

_EVENT_LOG_COLUMNS = (
    "event_log_id, category, message, project_id, period_id, transaction_id, actor_id, metadata, occurred_at_utc"
)


class SQLAlchemyAuditEventService(AuditSinkPort, AuditEventReadPort):
    """SQLAlchemy-backed audit sink and reader.

    Rows are only ever inserted; the table has no update or delete path.
    Ledger transitions append their events through the unit-of-work session
    instead, so they commit together with the state change.
    """

    def __init__(self, engine: Engine):
        """Initialize audit log persistence service.

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

    def audit_append(self, event: AuditEvent) -> AuditEventRecord:
        """Append one audit event in its own transaction.

        Args:
            event: Event payload.

        Returns:
            AuditEventRecord: Persisted event row.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            with self._engine.begin() as connection:
                return db_insert_event_log(connection, event)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to append audit event") from error

    def db_audit_event_list(
        self,
        limit: int,
        offset: int,
        project_id: UUID | None = None,
        period_id: UUID | None = None,
        category: AuditEventCategory | None = None,
    ) -> list[AuditEventRecord]:
        """List audit events newest first with optional filters.

        Args:
            limit: Maximum number of rows.
            offset: Number of rows to skip.
            project_id: Optional project filter.
            period_id: Optional period filter.
            category: Optional category filter.

        Returns:
            list[AuditEventRecord]: Ordered events.

        Raises:
            ValueError: Raised when limit or offset are invalid.
            RuntimeError: Raised when database read fails.
        """

        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        where_clauses: list[str] = []
        parameters: dict[str, Any] = {"limit": limit, "offset": offset}
        if project_id is not None:
            where_clauses.append("project_id = :project_id")
            parameters["project_id"] = project_id
        if period_id is not None:
            where_clauses.append("period_id = :period_id")
            parameters["period_id"] = period_id
        if category is not None:
            where_clauses.append("category = :category")
            parameters["category"] = category.value

        where_sql = ""
        if where_clauses:
            where_sql = "WHERE " + " AND ".join(where_clauses) + " "

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        f"SELECT {_EVENT_LOG_COLUMNS} FROM event_log "
                        + where_sql
                        + "ORDER BY occurred_at_utc DESC, event_log_id DESC "
                        + "LIMIT :limit OFFSET :offset"
                    ),
                    parameters,
                ).mappings().all()
                return [db_map_event_log_record(row) for row in rows]
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list audit events") from error


def db_insert_event_log(connection: Connection, event: AuditEvent) -> AuditEventRecord:
    """Insert one event row on an open connection.

    Args:
        connection: Connection whose transaction owns the insert.
        event: Event payload.

    Returns:
        AuditEventRecord: Persisted event row.

    Raises:
        SQLAlchemyError: Raised when the insert fails.
    """

    row = connection.execute(
        text(
            "INSERT INTO event_log ("
            "category, message, project_id, period_id, transaction_id, actor_id, metadata, occurred_at_utc"
            ") VALUES ("
            ":category, :message, :project_id, :period_id, :transaction_id, :actor_id, "
            "CAST(:metadata AS jsonb), :occurred_at_utc"
            ") "
            f"RETURNING {_EVENT_LOG_COLUMNS}"
        ),
        {
            "category": event.category.value,
            "message": event.message,
            "project_id": event.project_id,
            "period_id": event.period_id,
            "transaction_id": event.transaction_id,
            "actor_id": event.actor_id,
            "metadata": json.dumps(event.metadata, sort_keys=True),
            "occurred_at_utc": event.occurred_at_utc,
        },
    ).mappings().one()
    return db_map_event_log_record(row)


def db_map_event_log_record(row: Any) -> AuditEventRecord:
    """Map SQLAlchemy row mapping to typed audit event record.

    Args:
        row: SQLAlchemy mapping row.

    Returns:
        AuditEventRecord: Typed event record.

    Raises:
        TypeError: Raised when stored metadata is not a JSON object.
    """

    metadata_value = row["metadata"]
    if metadata_value is None:
        metadata_value = {}
    if not isinstance(metadata_value, dict):
        raise TypeError("event_log.metadata must be a JSON object")

    return AuditEventRecord(
        event_log_id=row["event_log_id"],
        event=AuditEvent(
            category=AuditEventCategory(row["category"]),
            message=row["message"],
            occurred_at_utc=row["occurred_at_utc"],
            project_id=row["project_id"],
            period_id=row["period_id"],
            transaction_id=row["transaction_id"],
            actor_id=row["actor_id"],
            metadata=metadata_value,
        ),
    )
