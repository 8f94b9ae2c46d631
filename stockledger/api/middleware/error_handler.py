"""
Translation of ledger exceptions into JSON error responses.

Every failure leaves the API as an ``ErrorResponse`` body: a stable
``error_code`` clients can branch on, the exception's message, a short
recovery hint and the request id bound by the logging middleware.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from stockledger.application.dto.responses import ErrorResponse
from stockledger.config import get_logger
from stockledger.core.exceptions import (
    BackupError,
    ConfigurationError,
    LedgerError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)

# Checked in order; subclasses must come before their bases
STATUS_BY_EXCEPTION: tuple[tuple[type[Exception], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (BackupError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ValueError, status.HTTP_400_BAD_REQUEST),
)

HINTS: dict[str, str] = {
    "PRODUCT_NOT_FOUND": "GET /api/products lists the products that exist.",
    "MOVEMENT_NOT_FOUND": "GET /api/movements lists recorded movements.",
    "INSUFFICIENT_STOCK": "Register production first or sell fewer units.",
    "INVALID_QUANTITY": "Send a whole number of units greater than zero.",
    "INVALID_PRICE": "Give a unit price above zero, or set one on the product.",
    "INVALID_COST": "Unit cost may be zero but not negative.",
    "ZERO_ADJUSTMENT": "An adjustment must add or remove at least one unit.",
    "NEGATIVE_STOCK": "Remove no more units than the product has in stock.",
    "FIELD_NOT_EDITABLE": "Quantity and average cost only change through movements.",
    "MALFORMED_BACKUP": "Upload a file produced by GET /api/backup/export.",
    "BACKUP_TOO_LARGE": "Raise BACKUP_MAX_SIZE_BYTES or import a smaller file.",
    "FUTURE_SCHEMA": "Upgrade this server before importing the backup.",
    "UNKNOWN_INDEX": "Query by one of the indexes the collection declares.",
    "DATABASE_ERROR": "Nothing was saved. See the server log for the request id.",
    "VALIDATION_ERROR": "Compare the request body with the schema at /docs.",
}

HTTP_ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "PAYLOAD_TOO_LARGE",
    422: "UNPROCESSABLE_ENTITY",
}


def status_for(exc: Exception) -> int:
    for exc_type, code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _render(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=HINTS.get(error_code),
        details=details or {},
        path=request.url.path,
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def error_response(request: Request, exc: Exception) -> JSONResponse:
    """Build the response for a ledger error or an unexpected exception."""
    status_code = status_for(exc)
    if isinstance(exc, LedgerError):
        error_code, message, details = exc.code, exc.message, exc.details
    else:
        error_code, message, details = "INTERNAL_ERROR", str(exc) or type(exc).__name__, {}

    if status_code >= 500:
        logger.exception("request_error", path=request.url.path, error_code=error_code)
    else:
        logger.warning("request_rejected", path=request.url.path, error_code=error_code, error=message)

    return _render(request, status_code, error_code, message, details)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Catches whatever the exception handlers below did not."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            return error_response(request, e)


async def _on_ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
    return error_response(request, exc)


async def _on_invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = {
        ".".join(str(part) for part in error["loc"]): error["msg"] for error in exc.errors()
    }
    logger.warning("request_invalid", path=request.url.path, fields=list(problems))
    return _render(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        problems,
    )


async def _on_http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return _render(
        request,
        exc.status_code,
        HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
        str(exc.detail) if exc.detail else "Request failed",
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LedgerError, _on_ledger_error)
    app.add_exception_handler(RequestValidationError, _on_invalid_request)
    app.add_exception_handler(HTTPException, _on_http_error)
