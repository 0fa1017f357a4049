"""Database layer package for all SQL and persistence boundaries."""

from .audit_log import SQLAlchemyAuditEventService
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
	PERIOD_LOCK_NONE,
	PERIOD_LOCK_SHARE,
	PERIOD_LOCK_UPDATE,
	AuditEventReadPort,
	AuditSinkPort,
	DatabaseHealthPort,
	LedgerSessionPort,
	LedgerUnitOfWorkPort,
	NotificationQueuePort,
	PeriodCreateRequest,
	PeriodStatusUpdate,
	ProjectRepositoryPort,
	TransactionWriteRequest,
)
from .ledger_store import SQLAlchemyLedgerUnitOfWork, db_build_project_lock_keys
from .notification_queue import SQLAlchemyNotificationQueueService
from .project_store import SQLAlchemyProjectService
from .session import db_create_engine

__all__ = [
	"PERIOD_LOCK_NONE",
	"PERIOD_LOCK_SHARE",
	"PERIOD_LOCK_UPDATE",
	"AuditEventReadPort",
	"AuditSinkPort",
	"DatabaseHealthPort",
	"LedgerSessionPort",
	"LedgerUnitOfWorkPort",
	"NotificationQueuePort",
	"PeriodCreateRequest",
	"PeriodStatusUpdate",
	"ProjectRepositoryPort",
	"TransactionWriteRequest",
	"SQLAlchemyAuditEventService",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyLedgerUnitOfWork",
	"SQLAlchemyNotificationQueueService",
	"SQLAlchemyProjectService",
	"db_build_project_lock_keys",
	"db_create_engine",
]
