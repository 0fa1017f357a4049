"""Notification queue API router."""

from __future__ import annotations

from collections.abc import Callable
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.domain import ActorContext, LedgerError, NotificationStatus
from app.jobs import NotificationWorkflowPort

from ..errors import api_error_response, api_ledger_error_response
from ..schemas import NotificationStatusBody
from ..serialization import api_build_page, api_serialize_notification_record


def api_create_notifications_router(
    settings: AppSettings,
    notification_workflow: NotificationWorkflowPort,
    actor_dependency: Callable[..., ActorContext],
) -> APIRouter:
    """Create notification router.

    Args:
        settings: Runtime settings used for pagination defaults.
        notification_workflow: Job-layer notification workflow.
        actor_dependency: Dependency resolving the caller.

    Returns:
        APIRouter: Router exposing `/notifications` endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if notification_workflow is None:
        raise ValueError("notification_workflow must not be None")

    router = APIRouter(prefix="/notifications", tags=["notifications"])

    @router.get("")
    def api_notification_list(
        limit: int = Query(default=settings.api_default_limit, ge=1),
        offset: int = Query(default=0, ge=0),
        status_filter: str | None = Query(default=None, alias="status"),
    ) -> JSONResponse:
        """Return notifications newest first.

        Returns:
            JSONResponse: Notification list payload.

        Raises:
            RuntimeError: Raised when repository read fails.
        """

        notification_status = None
        if status_filter is not None:
            try:
                notification_status = _api_parse_notification_status(status_filter)
            except ValueError as error:
                return api_error_response(status.HTTP_400_BAD_REQUEST, "INVALID_STATUS", str(error))

        applied_limit = min(limit, settings.api_max_limit)
        notifications = notification_workflow.job_notification_list(
            limit=applied_limit,
            offset=offset,
            status=notification_status,
        )
        payload = {
            "items": [api_serialize_notification_record(notification) for notification in notifications],
            "page": api_build_page(limit, applied_limit, offset, len(notifications)),
            "filters": {"status": notification_status.value if notification_status else None},
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.patch("/{notification_id}/status")
    def api_notification_mark(
        notification_id: UUID,
        body: NotificationStatusBody,
        actor: ActorContext = Depends(actor_dependency),
    ) -> JSONResponse:
        """Record the delivery outcome of one notification.

        Returns:
            JSONResponse: Updated notification, or 400/404 error.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            notification_status = _api_parse_notification_status(body.status)
        except ValueError as error:
            return api_error_response(status.HTTP_400_BAD_REQUEST, "INVALID_STATUS", str(error))

        try:
            notification = notification_workflow.job_notification_mark(
                notification_id=notification_id,
                status=notification_status,
                last_error=body.last_error,
                actor=actor,
            )
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_notification_record(notification), status_code=status.HTTP_200_OK)

    return router


def _api_parse_notification_status(value: str) -> NotificationStatus:
    normalized_value = value.strip().upper()
    try:
        return NotificationStatus(normalized_value)
    except ValueError as error:
        allowed_values = ", ".join(member.value for member in NotificationStatus)
        raise ValueError(f"status must be one of: {allowed_values}") from error
