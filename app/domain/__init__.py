"""Domain models used across application layer boundaries."""

from .audit import domain_build_audit_event, domain_serialize_balances
from .errors import (
	AccessDeniedError,
	LedgerError,
	LedgerValidationError,
	NotificationNotFoundError,
	PeriodNotFoundError,
	PeriodStateError,
	ProjectNotFoundError,
	ReconciliationImbalanceError,
	TransactionIntegrityError,
	TransactionNotFoundError,
)
from .models import (
	ActorContext,
	ActorRole,
	AuditEvent,
	AuditEventCategory,
	AuditEventRecord,
	HealthStatus,
	NotificationRecord,
	NotificationStatus,
	Partner,
	PeriodRecord,
	PeriodStatus,
	ProjectRecord,
	TransactionRecord,
	TransactionType,
	domain_zero_balances,
)

__all__ = [
	"HealthStatus",
	"ActorContext",
	"ActorRole",
	"AuditEvent",
	"AuditEventCategory",
	"AuditEventRecord",
	"NotificationRecord",
	"NotificationStatus",
	"Partner",
	"PeriodRecord",
	"PeriodStatus",
	"ProjectRecord",
	"TransactionRecord",
	"TransactionType",
	"domain_zero_balances",
	"domain_build_audit_event",
	"domain_serialize_balances",
	"LedgerError",
	"LedgerValidationError",
	"TransactionIntegrityError",
	"PeriodStateError",
	"ReconciliationImbalanceError",
	"PeriodNotFoundError",
	"ProjectNotFoundError",
	"TransactionNotFoundError",
	"NotificationNotFoundError",
	"AccessDeniedError",
]
