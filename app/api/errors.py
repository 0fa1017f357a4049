"""Mapping from ledger exceptions to deterministic JSON error responses."""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.domain import (
    AccessDeniedError,
    LedgerError,
    LedgerValidationError,
    PeriodStateError,
    ReconciliationImbalanceError,
    TransactionIntegrityError,
    domain_serialize_balances,
)

logger = logging.getLogger(__name__)


def api_error_response(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, object] | None = None,
) -> JSONResponse:
    """Build the shared error envelope.

    Args:
        status_code: HTTP status code.
        code: Stable machine-readable error code.
        message: Human-readable message.
        details: Optional structured details.

    Returns:
        JSONResponse: Error response.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    payload: dict[str, object] = {
        "status": "error",
        "code": code,
        "message": message,
    }
    if details:
        payload["details"] = details
    return JSONResponse(content=payload, status_code=status_code)


def api_ledger_error_response(error: LedgerError) -> JSONResponse:
    """Translate one ledger exception into its HTTP error response.

    Args:
        error: Raised ledger exception.

    Returns:
        JSONResponse: 403, 404, 409, 422 or 400 error envelope.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(error, AccessDeniedError):
        return api_error_response(
            status.HTTP_403_FORBIDDEN,
            error.error_code,
            str(error),
            {"operation": error.operation},
        )
    if isinstance(error, LookupError):
        return api_error_response(status.HTTP_404_NOT_FOUND, error.error_code, str(error))
    if isinstance(error, ReconciliationImbalanceError):
        return api_error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            error.error_code,
            str(error),
            {
                "ending_balances": domain_serialize_balances(error.ending_balances),
                "imbalance": str(error.imbalance),
            },
        )
    if isinstance(error, TransactionIntegrityError):
        return api_error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            error.error_code,
            str(error),
            {"field": error.field},
        )
    if isinstance(error, PeriodStateError):
        return api_error_response(
            status.HTTP_409_CONFLICT,
            error.error_code,
            str(error),
            {"expected_status": error.expected_status, "actual_status": error.actual_status},
        )
    if isinstance(error, LedgerValidationError):
        return api_error_response(
            status.HTTP_400_BAD_REQUEST,
            error.error_code,
            str(error),
            {"field": error.field} if error.field else None,
        )
    return api_error_response(status.HTTP_400_BAD_REQUEST, error.error_code, str(error))


def api_request_validation_handler(request: Request, error: RequestValidationError) -> JSONResponse:
    """Render FastAPI request validation failures in the shared envelope.

    Args:
        request: Incoming request.
        error: FastAPI validation failure.

    Returns:
        JSONResponse: 400 error envelope listing failing locations.

    Raises:
        RuntimeError: This handler does not raise runtime errors.
    """

    del request
    failures = [
        {
            "loc": [str(part) for part in failure.get("loc", ())],
            "message": str(failure.get("msg", "invalid value")),
        }
        for failure in error.errors()
    ]
    return api_error_response(
        status.HTTP_400_BAD_REQUEST,
        LedgerValidationError.error_code,
        "request validation failed",
        {"errors": failures},
    )


def api_storage_error_handler(request: Request, error: RuntimeError) -> JSONResponse:
    """Render persistence failures that escape a router in the shared envelope.

    Ledger errors deriving from `RuntimeError` keep their own mapping.

    Args:
        request: Incoming request.
        error: Unhandled runtime failure.

    Returns:
        JSONResponse: 503 `STORAGE_ERROR` envelope, or the ledger error response.

    Raises:
        RuntimeError: This handler does not raise runtime errors.
    """

    if isinstance(error, LedgerError):
        return api_ledger_error_response(error)
    logger.exception("request failed method=%s path=%s", request.method, request.url.path, exc_info=error)
    return api_error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "STORAGE_ERROR", "storage unavailable")
