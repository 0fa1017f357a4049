"""Period API router for lifecycle transitions and balance previews."""

from __future__ import annotations

from collections.abc import Callable
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.domain import ActorContext, LedgerError
from app.jobs import PeriodWorkflowPort
from app.ledger import PeriodTransitionResult

from ..errors import api_ledger_error_response
from ..schemas import PeriodNameBody
from ..serialization import api_serialize_balance_preview, api_serialize_period_record


def api_create_periods_router(
    period_workflow: PeriodWorkflowPort,
    actor_dependency: Callable[..., ActorContext],
) -> APIRouter:
    """Create period router.

    Args:
        period_workflow: Job-layer period workflow.
        actor_dependency: Dependency resolving the caller.

    Returns:
        APIRouter: Router exposing project-scoped and period-scoped endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if period_workflow is None:
        raise ValueError("period_workflow must not be None")
    if actor_dependency is None:
        raise ValueError("actor_dependency must not be None")

    router = APIRouter(tags=["periods"])

    @router.get("/projects/{project_id}/periods")
    def api_period_list(project_id: UUID) -> JSONResponse:
        """Return all periods of one project newest first.

        Returns:
            JSONResponse: Period list payload or 404 when the project is absent.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            periods = period_workflow.job_period_list_for_project(project_id)
        except LedgerError as error:
            return api_ledger_error_response(error)
        payload = {
            "items": [api_serialize_period_record(period) for period in periods],
            "returned": len(periods),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("/projects/{project_id}/periods/bootstrap")
    def api_period_bootstrap(project_id: UUID, actor: ActorContext = Depends(actor_dependency)) -> JSONResponse:
        """Create the opening period of a project without periods.

        Returns:
            JSONResponse: 201 when created, 200 when periods already existed.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            result = period_workflow.job_period_bootstrap(project_id=project_id, actor=actor)
        except LedgerError as error:
            return api_ledger_error_response(error)
        status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
        return JSONResponse(content=api_serialize_transition_result(result), status_code=status_code)

    @router.post("/projects/{project_id}/periods/reset")
    def api_period_hard_reset(project_id: UUID, actor: ActorContext = Depends(actor_dependency)) -> JSONResponse:
        """Force-close open periods and start over from zero balances.

        Returns:
            JSONResponse: Fresh period and force-closed periods.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            result = period_workflow.job_period_hard_reset(project_id=project_id, actor=actor)
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_transition_result(result), status_code=status.HTTP_200_OK)

    @router.get("/periods/{period_id}")
    def api_period_detail(period_id: UUID) -> JSONResponse:
        """Return one period.

        Returns:
            JSONResponse: Period payload or 404 when absent.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            period = period_workflow.job_period_get(period_id)
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_period_record(period), status_code=status.HTTP_200_OK)

    @router.get("/periods/{period_id}/balances")
    def api_period_balances(period_id: UUID) -> JSONResponse:
        """Return the reconciliation a close would compute right now.

        Returns:
            JSONResponse: Preview payload, including the zero-sum verdict.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            preview = period_workflow.job_period_preview(period_id)
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_balance_preview(preview), status_code=status.HTTP_200_OK)

    @router.post("/periods/{period_id}/close")
    def api_period_close(period_id: UUID, actor: ActorContext = Depends(actor_dependency)) -> JSONResponse:
        """Close one active period and open its pending successor.

        Returns:
            JSONResponse: Closed period and successor, or 403/404/409/422 error.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            result = period_workflow.job_period_close(period_id=period_id, actor=actor)
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_transition_result(result), status_code=status.HTTP_200_OK)

    @router.post("/periods/{period_id}/name")
    def api_period_name(
        period_id: UUID,
        body: PeriodNameBody,
        actor: ActorContext = Depends(actor_dependency),
    ) -> JSONResponse:
        """Name one pending period and activate it.

        Returns:
            JSONResponse: Activated period, or 400/403/404/409 error.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            result = period_workflow.job_period_name(period_id=period_id, name=body.name, actor=actor)
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_transition_result(result), status_code=status.HTTP_200_OK)

    return router


def api_serialize_transition_result(result: PeriodTransitionResult) -> dict[str, object]:
    """Serialize one period transition outcome.

    Args:
        result: Ledger transition result.

    Returns:
        dict[str, object]: Primary period, optional successor and force-closed periods.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return {
        "period": api_serialize_period_record(result.period),
        "successor": api_serialize_period_record(result.successor) if result.successor else None,
        "created": result.created,
        "closed_periods": [api_serialize_period_record(period) for period in result.closed_periods],
        "events": [event.category.value for event in result.events],
    }
