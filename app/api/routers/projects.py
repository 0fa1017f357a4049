"""Project API router for project creation, list and detail endpoints."""

from __future__ import annotations

from collections.abc import Callable
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.config import AppSettings
from app.db import AuditSinkPort, ProjectRepositoryPort
from app.domain import AccessDeniedError, ActorContext
from app.jobs import job_require_admin

from ..errors import api_error_response, api_ledger_error_response
from ..schemas import ProjectCreateBody
from ..serialization import api_build_page, api_serialize_project_record


def api_create_projects_router(
    settings: AppSettings,
    project_repository: ProjectRepositoryPort,
    audit_sink: AuditSinkPort,
    actor_dependency: Callable[..., ActorContext],
) -> APIRouter:
    """Create project router.

    Args:
        settings: Runtime settings used for pagination defaults.
        project_repository: DB-layer project repository.
        audit_sink: DB-layer audit sink for access refusals.
        actor_dependency: Dependency resolving the caller.

    Returns:
        APIRouter: Router exposing `/projects` endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if project_repository is None:
        raise ValueError("project_repository must not be None")
    if audit_sink is None:
        raise ValueError("audit_sink must not be None")

    router = APIRouter(prefix="/projects", tags=["projects"])

    @router.post("")
    def api_project_create(body: ProjectCreateBody, actor: ActorContext = Depends(actor_dependency)) -> JSONResponse:
        """Create one project; requires the ADMIN role.

        Returns:
            JSONResponse: 201 with the created project.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            job_require_admin(audit_sink, actor, "project_create")
        except AccessDeniedError as error:
            return api_ledger_error_response(error)

        try:
            project = project_repository.db_project_create(name=body.name, description=body.description)
        except ValueError as error:
            return api_error_response(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", str(error), {"field": "name"})
        return JSONResponse(content=api_serialize_project_record(project), status_code=status.HTTP_201_CREATED)

    @router.get("")
    def api_project_list(
        limit: int = Query(default=settings.api_default_limit, ge=1),
        offset: int = Query(default=0, ge=0),
    ) -> JSONResponse:
        """Return projects newest first.

        Args:
            limit: Max rows to return; capped by `api_max_limit`.
            offset: Rows to skip.

        Returns:
            JSONResponse: Project list payload.

        Raises:
            RuntimeError: Raised when repository read fails.
        """

        applied_limit = min(limit, settings.api_max_limit)
        projects = project_repository.db_project_list(limit=applied_limit, offset=offset)
        payload = {
            "items": [api_serialize_project_record(project) for project in projects],
            "page": api_build_page(limit, applied_limit, offset, len(projects)),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/{project_id}")
    def api_project_detail(project_id: UUID) -> JSONResponse:
        """Return one project.

        Returns:
            JSONResponse: Project payload or 404 when absent.

        Raises:
            RuntimeError: Raised when repository read fails.
        """

        project = project_repository.db_project_get_by_id(project_id=project_id)
        if project is None:
            return api_error_response(status.HTTP_404_NOT_FOUND, "NOT_FOUND", f"project {project_id} not found")
        return JSONResponse(content=api_serialize_project_record(project), status_code=status.HTTP_200_OK)

    return router
