"""Transaction API router for gated transaction writes."""

from __future__ import annotations

from collections.abc import Callable
from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.domain import ActorContext, LedgerError
from app.jobs import TransactionWorkflowPort

from ..errors import api_ledger_error_response
from ..schemas import TransactionBody
from ..serialization import api_serialize_transaction_record


def api_create_transactions_router(
    transaction_workflow: TransactionWorkflowPort,
    actor_dependency: Callable[..., ActorContext],
) -> APIRouter:
    """Create transaction router.

    Args:
        transaction_workflow: Job-layer transaction workflow.
        actor_dependency: Dependency resolving the caller.

    Returns:
        APIRouter: Router exposing period-scoped and transaction-scoped endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if transaction_workflow is None:
        raise ValueError("transaction_workflow must not be None")
    if actor_dependency is None:
        raise ValueError("actor_dependency must not be None")

    router = APIRouter(tags=["transactions"])

    @router.get("/periods/{period_id}/transactions")
    def api_transaction_list(period_id: UUID) -> JSONResponse:
        """Return transactions of one period, latest date first.

        Returns:
            JSONResponse: Transaction list payload or 404 when the period is absent.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            transactions = transaction_workflow.job_transaction_list_for_period(period_id)
        except LedgerError as error:
            return api_ledger_error_response(error)
        payload = {
            "items": [api_serialize_transaction_record(transaction) for transaction in transactions],
            "returned": len(transactions),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/projects/{project_id}/transactions")
    def api_project_transaction_list(project_id: UUID) -> JSONResponse:
        """Return transactions of every period of one project, latest date first.

        Returns:
            JSONResponse: Transaction list payload or 404 when the project is absent.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            transactions = transaction_workflow.job_transaction_list_for_project(project_id)
        except LedgerError as error:
            return api_ledger_error_response(error)
        payload = {
            "items": [api_serialize_transaction_record(transaction) for transaction in transactions],
            "returned": len(transactions),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/transactions/{transaction_id}")
    def api_transaction_get(transaction_id: UUID) -> JSONResponse:
        """Return one transaction.

        Returns:
            JSONResponse: Transaction payload or 404 when absent.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            transaction = transaction_workflow.job_transaction_get(transaction_id)
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_transaction_record(transaction), status_code=status.HTTP_200_OK)

    @router.post("/periods/{period_id}/transactions")
    def api_transaction_create(
        period_id: UUID,
        body: TransactionBody,
        actor: ActorContext = Depends(actor_dependency),
    ) -> JSONResponse:
        """Record one transaction in an active period.

        Returns:
            JSONResponse: 201 with the created transaction, or 400/404/409 error.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            result = transaction_workflow.job_transaction_create(
                period_id=period_id,
                draft=body.api_to_draft(),
                actor=actor,
            )
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(
            content=api_serialize_transaction_record(result.transaction),
            status_code=status.HTTP_201_CREATED,
        )

    @router.patch("/transactions/{transaction_id}")
    def api_transaction_update(
        transaction_id: UUID,
        body: TransactionBody,
        actor: ActorContext = Depends(actor_dependency),
    ) -> JSONResponse:
        """Replace the editable fields of one transaction.

        Returns:
            JSONResponse: Updated transaction, or 400/404/409 error.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            result = transaction_workflow.job_transaction_update(
                transaction_id=transaction_id,
                draft=body.api_to_draft(),
                actor=actor,
            )
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_transaction_record(result.transaction), status_code=status.HTTP_200_OK)

    @router.delete("/transactions/{transaction_id}")
    def api_transaction_delete(transaction_id: UUID, actor: ActorContext = Depends(actor_dependency)) -> JSONResponse:
        """Delete one transaction.

        Returns:
            JSONResponse: Removed transaction, or 404/409 error.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

        try:
            result = transaction_workflow.job_transaction_delete(transaction_id=transaction_id, actor=actor)
        except LedgerError as error:
            return api_ledger_error_response(error)
        return JSONResponse(content=api_serialize_transaction_record(result.transaction), status_code=status.HTTP_200_OK)

    return router
