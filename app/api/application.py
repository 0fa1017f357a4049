"""FastAPI application factory for the period ledger service.

This module wires routers to the db-layer repositories and job-layer workflows
built by `app.bootstrap`.
"""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from app.config import AppSettings
from app.db import AuditEventReadPort, AuditSinkPort, DatabaseHealthPort, ProjectRepositoryPort
from app.jobs import NotificationWorkflowPort, PeriodWorkflowPort, TransactionWorkflowPort

from .access import api_create_actor_dependency
from .errors import api_request_validation_handler, api_storage_error_handler
from .routers import (
    api_create_events_router,
    api_create_health_router,
    api_create_notifications_router,
    api_create_periods_router,
    api_create_projects_router,
    api_create_transactions_router,
)


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    project_repository: ProjectRepositoryPort,
    audit_sink: AuditSinkPort,
    audit_reader: AuditEventReadPort,
    period_workflow: PeriodWorkflowPort,
    transaction_workflow: TransactionWorkflowPort,
    notification_workflow: NotificationWorkflowPort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings.
        db_health_service: Database health service used by health endpoints.
        project_repository: Project repository for project APIs.
        audit_sink: Audit sink used to record refused project writes.
        audit_reader: Audit event reader for `/events`.
        period_workflow: Period lifecycle workflow.
        transaction_workflow: Transaction workflow.
        notification_workflow: Notification bookkeeping workflow.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when a router dependency is None.
    """

    application = FastAPI(title="Partner Period Ledger")
    application.add_exception_handler(RequestValidationError, api_request_validation_handler)
    application.add_exception_handler(RuntimeError, api_storage_error_handler)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service identification for bootstrap verification.

        Returns:
            dict[str, str]: Service name, readiness and environment.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        return {
            "service": "partner-period-ledger",
            "status": "ready",
            "environment": settings.environment_name,
        }

    actor_dependency = api_create_actor_dependency(settings)

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(
        api_create_projects_router(
            settings=settings,
            project_repository=project_repository,
            audit_sink=audit_sink,
            actor_dependency=actor_dependency,
        )
    )
    application.include_router(
        api_create_periods_router(period_workflow=period_workflow, actor_dependency=actor_dependency)
    )
    application.include_router(
        api_create_transactions_router(transaction_workflow=transaction_workflow, actor_dependency=actor_dependency)
    )
    application.include_router(api_create_events_router(settings=settings, audit_reader=audit_reader))
    application.include_router(
        api_create_notifications_router(
            settings=settings,
            notification_workflow=notification_workflow,
            actor_dependency=actor_dependency,
        )
    )

    return application
