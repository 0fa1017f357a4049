"""Job-layer notification delivery bookkeeping."""

from __future__ import annotations

import logging
from uuid import UUID

from app.db import AuditSinkPort, NotificationQueuePort
from app.domain import (
    ActorContext,
    AuditEventCategory,
    LedgerValidationError,
    NotificationNotFoundError,
    NotificationRecord,
    NotificationStatus,
    domain_build_audit_event,
)

from .audit_forwarding import job_forward_audit_events
from .interfaces import NotificationWorkflowPort

logger = logging.getLogger(__name__)

_DELIVERY_EVENT_CATEGORIES = {
    NotificationStatus.SENT: AuditEventCategory.NOTIF_SENT,
    NotificationStatus.FAILED: AuditEventCategory.NOTIF_FAILED,
}


class NotificationWorkflowService(NotificationWorkflowPort):
    """Record delivery outcomes reported by an external notifier."""

    def __init__(self, notification_queue: NotificationQueuePort, audit_sink: AuditSinkPort):
        """Initialize notification workflow dependencies.

        Args:
            notification_queue: DB-layer notification queue.
            audit_sink: DB-layer audit sink.

        Raises:
            ValueError: Raised when dependencies are None.
        """

        if notification_queue is None:
            raise ValueError("notification_queue must not be None")
        if audit_sink is None:
            raise ValueError("audit_sink must not be None")
        self._notification_queue = notification_queue
        self._audit_sink = audit_sink

    def job_notification_mark(
        self,
        notification_id: UUID,
        status: NotificationStatus,
        last_error: str | None,
        actor: ActorContext,
    ) -> NotificationRecord:
        """Record one delivery outcome and publish `NOTIF_SENT` or `NOTIF_FAILED`.

        Args:
            notification_id: Notification identifier.
            status: `SENT` or `FAILED`.
            last_error: Optional failure message, kept only for `FAILED`.
            actor: Caller context.

        Returns:
            NotificationRecord: Updated notification.

        Raises:
            LedgerValidationError: Raised when status is not a delivery outcome.
            NotificationNotFoundError: Raised when the notification does not exist.
        """

        category = _DELIVERY_EVENT_CATEGORIES.get(status)
        if category is None:
            raise LedgerValidationError("status must be one of: SENT, FAILED", field="status")

        notification = self._notification_queue.db_notification_mark_delivery(
            notification_id=notification_id,
            status=status,
            last_error=last_error,
        )
        if notification is None:
            raise NotificationNotFoundError(f"notification {notification_id} not found")

        event = domain_build_audit_event(
            category=category,
            message=f"Notification {status.value.lower()}: {notification_id}",
            transaction_id=notification.transaction_id,
            actor_id=actor.actor_id,
            metadata={"notification_id": str(notification_id), "last_error": notification.last_error},
        )
        job_forward_audit_events(self._audit_sink, (event,))
        if status == NotificationStatus.FAILED:
            logger.warning("notification failed notification_id=%s: %s", notification_id, notification.last_error)
        else:
            logger.info("notification sent notification_id=%s", notification_id)
        return notification

    def job_notification_list(
        self,
        limit: int,
        offset: int,
        status: NotificationStatus | None = None,
    ) -> list[NotificationRecord]:
        """List notifications newest first."""

        return self._notification_queue.db_notification_list(limit=limit, offset=offset, status=status)
