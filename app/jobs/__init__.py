"""Job layer package for workflow orchestration boundaries."""

from .audit_forwarding import job_forward_audit_events, job_record_access_denied, job_require_admin
from .interfaces import NotificationWorkflowPort, PeriodWorkflowPort, TransactionWorkflowPort
from .notification_workflow import NotificationWorkflowService
from .period_workflow import PeriodWorkflowService
from .transaction_workflow import TransactionWorkflowService

__all__ = [
	"NotificationWorkflowPort",
	"PeriodWorkflowPort",
	"TransactionWorkflowPort",
	"NotificationWorkflowService",
	"PeriodWorkflowService",
	"TransactionWorkflowService",
	"job_forward_audit_events",
	"job_record_access_denied",
	"job_require_admin",
]
