"""Audit event API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.db import AuditEventReadPort
from app.domain import AuditEventCategory

from ..errors import api_error_response
from ..serialization import api_build_page, api_serialize_audit_event_record


def api_create_events_router(settings: AppSettings, audit_reader: AuditEventReadPort) -> APIRouter:
    """Create audit event router.

    Args:
        settings: Runtime settings used for pagination defaults.
        audit_reader: DB-layer audit event reader.

    Returns:
        APIRouter: Router exposing `/events`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if audit_reader is None:
        raise ValueError("audit_reader must not be None")

    router = APIRouter(tags=["events"])

    @router.get("/events")
    def api_event_list(
        limit: int = Query(default=settings.api_default_limit, ge=1),
        offset: int = Query(default=0, ge=0),
        project_id: UUID | None = Query(default=None),
        period_id: UUID | None = Query(default=None),
        category: str | None = Query(default=None),
    ) -> JSONResponse:
        """Return audit events newest first.

        Args:
            limit: Max rows to return; capped by `api_max_limit`.
            offset: Rows to skip.
            project_id: Optional project filter.
            period_id: Optional period filter.
            category: Optional category filter.

        Returns:
            JSONResponse: Event list payload.

        Raises:
            RuntimeError: Raised when repository read fails.
        """

        category_filter = None
        if category is not None:
            normalized_category = category.strip().upper()
            try:
                category_filter = AuditEventCategory(normalized_category)
            except ValueError:
                return api_error_response(
                    status.HTTP_400_BAD_REQUEST,
                    "INVALID_CATEGORY",
                    f"unsupported category={normalized_category}",
                )

        applied_limit = min(limit, settings.api_max_limit)
        records = audit_reader.db_audit_event_list(
            limit=applied_limit,
            offset=offset,
            project_id=project_id,
            period_id=period_id,
            category=category_filter,
        )
        payload = {
            "items": [api_serialize_audit_event_record(record) for record in records],
            "page": api_build_page(limit, applied_limit, offset, len(records)),
            "filters": {
                "project_id": str(project_id) if project_id else None,
                "period_id": str(period_id) if period_id else None,
                "category": category_filter.value if category_filter else None,
            },
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
