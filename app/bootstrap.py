"""Application bootstrap wiring for startup validation and dependency assembly."""

from dataclasses import dataclass

from fastapi import FastAPI

from app.api import create_api_application
from app.config import AppSettings, config_load_settings
from app.db import (
    SQLAlchemyAuditEventService,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyLedgerUnitOfWork,
    SQLAlchemyNotificationQueueService,
    SQLAlchemyProjectService,
    db_create_engine,
)
from app.jobs import NotificationWorkflowService, PeriodWorkflowService, TransactionWorkflowService
from app.ledger import PeriodTransitionConfig, PeriodTransitionManager, TransactionLedgerService


@dataclass(frozen=True)
class BootstrapServices:
    """Fully wired runtime services shared by the HTTP and CLI surfaces.

    Attributes:
        settings: Validated application settings.
        db_health_service: Database health service.
        project_repository: Project repository.
        audit_service: Audit sink and reader.
        period_workflow: Period lifecycle workflow.
        transaction_workflow: Transaction workflow.
        notification_workflow: Notification bookkeeping workflow.
    """

    settings: AppSettings
    db_health_service: SQLAlchemyDatabaseHealthService
    project_repository: SQLAlchemyProjectService
    audit_service: SQLAlchemyAuditEventService
    period_workflow: PeriodWorkflowService
    transaction_workflow: TransactionWorkflowService
    notification_workflow: NotificationWorkflowService


def bootstrap_create_services(settings: AppSettings | None = None) -> BootstrapServices:
    """Assemble db, ledger and job services from one engine.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when None.

    Returns:
        BootstrapServices: Wired services.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    engine = db_create_engine(
        database_url=resolved_settings.database_url,
        application_name=f"partner-period-ledger-{resolved_settings.environment_name}",
    )
    unit_of_work = SQLAlchemyLedgerUnitOfWork(engine=engine)
    audit_service = SQLAlchemyAuditEventService(engine=engine)
    notification_queue = SQLAlchemyNotificationQueueService(engine=engine)

    period_manager = PeriodTransitionManager(
        unit_of_work=unit_of_work,
        config=PeriodTransitionConfig(
            opening_period_name=resolved_settings.opening_period_name,
            reconciliation_tolerance=resolved_settings.reconciliation_tolerance,
        ),
    )
    transaction_service = TransactionLedgerService(unit_of_work=unit_of_work)

    return BootstrapServices(
        settings=resolved_settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        project_repository=SQLAlchemyProjectService(engine=engine),
        audit_service=audit_service,
        period_workflow=PeriodWorkflowService(period_ledger=period_manager, audit_sink=audit_service),
        transaction_workflow=TransactionWorkflowService(
            transaction_ledger=transaction_service,
            notification_queue=notification_queue,
        ),
        notification_workflow=NotificationWorkflowService(
            notification_queue=notification_queue,
            audit_sink=audit_service,
        ),
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    services = bootstrap_create_services(settings)
    return create_api_application(
        settings=services.settings,
        db_health_service=services.db_health_service,
        project_repository=services.project_repository,
        audit_sink=services.audit_service,
        audit_reader=services.audit_service,
        period_workflow=services.period_workflow,
        transaction_workflow=services.transaction_workflow,
        notification_workflow=services.notification_workflow,
    )
