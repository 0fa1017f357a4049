"""Database service for the per-transaction notification queue."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from app.domain import NotificationRecord, NotificationStatus

from .interfaces import NotificationQueuePort

_NOTIFICATION_COLUMNS = "notification_id, transaction_id, status, last_error, sent_at_utc, created_at_utc, updated_at_utc"


class SQLAlchemyNotificationQueueService(NotificationQueuePort):
    """SQLAlchemy-backed notification queue.

    Delivery itself happens outside this service; it only records queue state.
    """

    def __init__(self, engine: Engine):
        """Initialize notification queue persistence service.

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

    def db_notification_enqueue_pending(self, transaction_id: UUID) -> NotificationRecord:
        """Queue one pending notification for a transaction.

        Args:
            transaction_id: Transaction identifier.

        Returns:
            NotificationRecord: Inserted notification.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            with self._engine.begin() as connection:
                row = connection.execute(
                    text(
                        "INSERT INTO notification (transaction_id, status) "
                        "VALUES (:transaction_id, :status) "
                        f"RETURNING {_NOTIFICATION_COLUMNS}"
                    ),
                    {"transaction_id": transaction_id, "status": NotificationStatus.PENDING.value},
                ).mappings().one()
                return self._map_notification_record(row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to enqueue notification") from error

    def db_notification_mark_delivery(
        self,
        notification_id: UUID,
        status: NotificationStatus,
        last_error: str | None,
    ) -> NotificationRecord | None:
        """Record the delivery outcome of one notification.

        Args:
            notification_id: Notification identifier.
            status: New status.
            last_error: Optional failure message; cleared when status is `SENT`.

        Returns:
            NotificationRecord | None: Updated notification or None when absent.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            with self._engine.begin() as connection:
                row = connection.execute(
                    text(
                        "UPDATE notification SET "
                        "status = :status, "
                        "last_error = :last_error, "
                        "sent_at_utc = CASE WHEN CAST(:status AS text) = 'SENT' THEN now() ELSE sent_at_utc END, "
                        "updated_at_utc = now() "
                        "WHERE notification_id = :notification_id "
                        f"RETURNING {_NOTIFICATION_COLUMNS}"
                    ),
                    {
                        "status": status.value,
                        "last_error": None if status == NotificationStatus.SENT else last_error,
                        "notification_id": notification_id,
                    },
                ).mappings().first()
                if row is None:
                    return None
                return self._map_notification_record(row)
        except SQLAlchemyError as error:
            raise RuntimeError("failed to update notification status") from error

    def db_notification_list(
        self,
        limit: int,
        offset: int,
        status: NotificationStatus | None = None,
    ) -> list[NotificationRecord]:
        """List notifications newest first.

        Args:
            limit: Maximum number of rows.
            offset: Number of rows to skip.
            status: Optional status filter.

        Returns:
            list[NotificationRecord]: Ordered notifications.

        Raises:
            ValueError: Raised when limit or offset are invalid.
            RuntimeError: Raised when database read fails.
        """

        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        parameters: dict[str, Any] = {"limit": limit, "offset": offset}
        where_sql = ""
        if status is not None:
            where_sql = "WHERE status = :status "
            parameters["status"] = status.value

        try:
            with self._engine.connect() as connection:
                rows = connection.execute(
                    text(
                        f"SELECT {_NOTIFICATION_COLUMNS} FROM notification "
                        + where_sql
                        + "ORDER BY created_at_utc DESC, notification_id DESC "
                        + "LIMIT :limit OFFSET :offset"
                    ),
                    parameters,
                ).mappings().all()
                return [self._map_notification_record(row) for row in rows]
        except SQLAlchemyError as error:
            raise RuntimeError("failed to list notifications") from error

    def _map_notification_record(self, row: Any) -> NotificationRecord:
        """Map SQLAlchemy row mapping to typed notification record."""

        return NotificationRecord(
            notification_id=row["notification_id"],
            transaction_id=row["transaction_id"],
            status=NotificationStatus(row["status"]),
            last_error=row["last_error"],
            sent_at_utc=row["sent_at_utc"],
            created_at_utc=row["created_at_utc"],
            updated_at_utc=row["updated_at_utc"],
        )
