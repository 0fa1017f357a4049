"""API router package for endpoint composition."""

from .events import api_create_events_router
from .health import api_create_health_router
from .notifications import api_create_notifications_router
from .periods import api_create_periods_router, api_serialize_transition_result
from .projects import api_create_projects_router
from .transactions import api_create_transactions_router

__all__ = [
	"api_create_events_router",
	"api_create_health_router",
	"api_create_notifications_router",
	"api_create_periods_router",
	"api_create_projects_router",
	"api_create_transactions_router",
	"api_serialize_transition_result",
]
